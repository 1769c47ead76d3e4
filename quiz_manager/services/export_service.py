"""
Result export service
"""
import csv
import io
import logging

from sqlalchemy.orm import Session

from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.services.result_service import result_service

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["Quiz Name", "Username", "Score"]


class ExportService:

    def export_quiz_results_csv(self, db: Session, quiz_id: int) -> str:
        """
        Render a quiz's results as CSV text

        Score is written as the bare integer. A "85/100" cell would be read
        as a date by spreadsheet software.
        """
        quiz = quiz_service.get_quiz_by_id(db, quiz_id)
        results = result_service.get_results_by_quiz_id(db, quiz_id)

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)

        for result in results:
            username = result.student.username if result.student else str(result.student_id)
            writer.writerow([quiz.name, username, int(result.score)])

        logger.info(f"Exported {len(results)} results for quiz {quiz_id}")

        return buffer.getvalue()


# Global instance
export_service = ExportService()
