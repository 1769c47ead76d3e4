"""
Pydantic schemas for quiz results and statistics
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ResultResponse(BaseModel):
    id: int
    student_id: int
    quiz_id: int
    student_username: Optional[str] = None
    student_name: Optional[str] = None
    quiz_name: Optional[str] = None
    score: int
    total_points: int
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None
    completion_time_seconds: Optional[int] = None
    formatted_completion_time: str
    score_percentage: float
    submitted_at: datetime
    
    @classmethod
    def from_result(cls, result) -> "ResultResponse":
        return cls(
            id=result.id,
            student_id=result.student_id,
            quiz_id=result.quiz_id,
            student_username=result.student.username if result.student else None,
            student_name=result.student.full_name if result.student else None,
            quiz_name=result.quiz.name if result.quiz else None,
            score=result.score,
            total_points=result.total_points,
            correct_answers=result.correct_answers,
            total_questions=result.total_questions,
            completion_time_seconds=result.completion_time_seconds,
            formatted_completion_time=result.formatted_completion_time,
            score_percentage=round(result.score_percentage, 2),
            submitted_at=result.submitted_at
        )


class QuizStatisticsResponse(BaseModel):
    quiz_id: int
    total_students: int
    average_score: Optional[float] = None
    highest_score: Optional[int] = None
    lowest_score: Optional[int] = None


class ScoreUpdateRequest(BaseModel):
    """Regrade request"""
    score: int = Field(..., ge=0)


class ImportResultResponse(BaseModel):
    success_count: int
    error_count: int
    total_processed: int
    error_messages: List[str]
