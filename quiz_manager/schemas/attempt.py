"""
Pydantic schemas for quiz-taking sessions
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from quiz_manager.services.quiz_session import AttemptState


class AttemptStartRequest(BaseModel):
    quiz_id: int


class AnswerRequest(BaseModel):
    answer: str = Field(..., description="Option letter A-D")


class NavigateRequest(BaseModel):
    index: int = Field(..., ge=0, description="0-based question index")


class AttemptQuestion(BaseModel):
    """Current question as shown to the student - no correct answer"""
    id: int
    problem: str
    options: Dict[str, Optional[str]]


class QuizSummaryResponse(BaseModel):
    quiz_name: str
    score: int
    total_points: int
    correct_answers: int
    total_questions: int
    completion_time_seconds: int
    time_taken: str
    auto_submitted: bool
    saved: bool
    error: Optional[str] = None
    
    class Config:
        from_attributes = True


class AttemptResponse(BaseModel):
    attempt_id: str
    quiz_id: int
    quiz_name: str
    state: str
    current_index: int
    total_questions: int
    time_remaining: int
    answers: List[Optional[str]]
    question: Optional[AttemptQuestion] = None
    summary: Optional[QuizSummaryResponse] = None
    
    @classmethod
    def from_attempt(cls, attempt) -> "AttemptResponse":
        session = attempt.session
        question = None
        if session.questions and session.state == AttemptState.IN_PROGRESS:
            current = session.current_question
            question = AttemptQuestion(
                id=current["id"],
                problem=current["problem"],
                options=current["options"]
            )
        
        return cls(
            attempt_id=attempt.id,
            quiz_id=session.quiz_id,
            quiz_name=session.quiz.get("name") or "Quiz",
            state=session.state.value,
            current_index=session.current_index,
            total_questions=session.total_questions,
            time_remaining=session.time_remaining,
            answers=list(session.answers),
            question=question,
            summary=QuizSummaryResponse.model_validate(attempt.summary) if attempt.summary else None
        )
