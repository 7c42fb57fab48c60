# schemas/problems.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr

from prompts import Difficulty, ProblemType

# ---------- Generate ----------


class GenerateRequest(BaseModel):
    # kept as plain strings so bad values reach the prompt builder's own check
    difficulty: str = Difficulty.MEDIUM.value
    problem_type: str = ProblemType.ADDITION.value


class GenerateResponse(BaseModel):
    problem_text: str
    correct_answer: float
    session_id: str
    difficulty: Difficulty
    problem_type: ProblemType
    hints_available: int
    score_value: int


# ---------- Hints ----------


class HintOut(BaseModel):
    id: str
    hint_text: str
    hint_order: int


class HintsResponse(BaseModel):
    hints: List[HintOut]


# ---------- Solution ----------


class SolutionResponse(BaseModel):
    solution: str


# ---------- Submit ----------


class SubmitRequest(BaseModel):
    session_id: Optional[str] = None
    # numbers, or numeric text such as "3/4"; strict so a JSON true is not read as 1.0
    user_answer: Optional[Union[StrictFloat, StrictInt, StrictStr]] = None


class SubmitResponse(BaseModel):
    is_correct: bool
    feedback: str
    points_earned: int


# ---------- History ----------


class SubmissionSummary(BaseModel):
    is_correct: bool
    points_earned: int


class HistoryItem(BaseModel):
    session_id: str
    problem_text: str
    difficulty: str
    problem_type: str
    created_at: Optional[datetime]
    submission: Optional[SubmissionSummary] = None


class UserScoreOut(BaseModel):
    total_score: int
    problems_attempted: int
    problems_solved: int


class HistoryResponse(BaseModel):
    history: List[HistoryItem]
    score: UserScoreOut
