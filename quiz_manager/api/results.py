"""
Quiz result endpoints (teacher)
"""
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
import logging

from quiz_manager.api.deps import require_teacher
from quiz_manager.database import get_db
from quiz_manager.exceptions import NotFound
from quiz_manager.schemas.result import QuizStatisticsResponse, ResultResponse, ScoreUpdateRequest
from quiz_manager.services.export_service import export_service
from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.services.result_service import result_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/results", tags=["results"])
logger = logging.getLogger(__name__)


@router.get("/quiz/{quiz_id}", response_model=List[ResultResponse])
async def quiz_results(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """All results of a quiz, newest submission first"""
    quiz_service.get_quiz_by_id(db, quiz_id)
    results = result_service.get_results_by_quiz_id(db, quiz_id)
    return [ResultResponse.from_result(r) for r in results]


@router.get("/quiz/{quiz_id}/statistics", response_model=QuizStatisticsResponse)
async def quiz_statistics(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    quiz_service.get_quiz_by_id(db, quiz_id)
    stats = result_service.get_quiz_statistics(db, quiz_id)
    
    return QuizStatisticsResponse(
        quiz_id=quiz_id,
        total_students=stats.total_students,
        average_score=round(stats.average_score, 2) if stats.average_score is not None else None,
        highest_score=stats.highest_score,
        lowest_score=stats.lowest_score
    )


@router.get("/quiz/{quiz_id}/export")
async def export_quiz_results(
    quiz_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    """Download results as CSV: Quiz Name,Username,Score"""
    content = export_service.export_quiz_results_csv(db, quiz_id)
    
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="quiz_{quiz_id}_results.csv"'}
    )


@router.put("/{result_id}/score", response_model=ResultResponse)
async def regrade(
    result_id: int,
    request: ScoreUpdateRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    result = result_service.update_score(db, result_id, request.score)
    if result is None:
        raise NotFound(f"Result not found with ID: {result_id}")
    
    logger.info(f"Result {result_id} regraded by {user.username}")
    
    return ResultResponse.from_result(result)


@router.delete("/{result_id}", status_code=204)
async def delete_result(
    result_id: int,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_teacher)
):
    if not result_service.delete_result(db, result_id):
        raise NotFound(f"Result not found with ID: {result_id}")
