from typing import List
from pydantic import BaseModel, Field, StrictBool, field_validator

# --- generated by the model ---

class AnswerIn(BaseModel):
    answerText: str = Field(..., min_length=1)
    isCorrect: StrictBool

class QuestionIn(BaseModel):
    questionText: str = Field(..., min_length=1)
    answers: List[AnswerIn] = Field(..., min_length=2)

    @field_validator("answers")
    @classmethod
    def validate_answers(cls, v: List[AnswerIn]) -> List[AnswerIn]:
        if not any(a.isCorrect for a in v):
            raise ValueError("at least one answer must be marked correct")
        return v

class QuizIn(BaseModel):
    name: str
    description: str
    questions: List[QuestionIn] = Field(..., min_length=1)

# --- API ---

class GenerateQuizOut(BaseModel):
    quizzId: int

class ErrorOut(BaseModel):
    error: str

class AnswerOut(BaseModel):
    id: int
    answerText: str
    isCorrect: bool

class QuestionOut(BaseModel):
    id: int
    questionText: str
    answers: List[AnswerOut]

class QuizOut(BaseModel):
    id: int
    name: str | None
    description: str | None
    questions: List[QuestionOut]

class QuizListItem(BaseModel):
    id: int
    name: str | None
    description: str | None

class SubmissionAnswerIn(BaseModel):
    questionId: int
    answerId: int

class SubmissionIn(BaseModel):
    answers: List[SubmissionAnswerIn]

class SubmissionResultOut(BaseModel):
    submissionId: int
    score: int
    total: int

class SubmissionOut(BaseModel):
    id: int
    score: int | None
    createdAt: str
