"""
Pydantic schemas for quizzes, questions and assignments
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class QuestionCreate(BaseModel):
    """A multiple choice question submitted with a new quiz"""
    problem: str = Field(..., min_length=1)
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: str = Field(..., pattern="^[A-Da-d]$", description="Correct option letter")


class QuizCreateRequest(BaseModel):
    """Request schema for quiz creation"""
    name: str = Field(..., min_length=1, max_length=255)
    time_limit: int = Field(..., gt=0, description="Time limit in minutes")
    questions: List[QuestionCreate]


class QuizResponse(BaseModel):
    id: int
    name: str
    time_limit: Optional[int] = None
    number_of_questions: int
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class StudentQuizResponse(QuizResponse):
    """Quiz as listed on a student's dashboard"""
    completed: bool


class QuestionResponse(BaseModel):
    """Full question, including the answer (teacher view)"""
    id: int
    problem: str
    option_a: Optional[str] = None
    option_b: Optional[str] = None
    option_c: Optional[str] = None
    option_d: Optional[str] = None
    correct_answer: str
    
    class Config:
        from_attributes = True


class AssignStudentRequest(BaseModel):
    username: str = Field(..., min_length=1)


class StudentResponse(BaseModel):
    id: int
    username: str
    full_name: Optional[str] = None
    student_code: Optional[str] = None
    
    class Config:
        from_attributes = True
