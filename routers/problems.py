# routers/problems.py
from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from deps.services import get_problem_service
from errors import MathProblemError
from problem_service import HISTORY_DEFAULT_LIMIT, ProblemService
from schemas.problems import (
    GenerateRequest,
    GenerateResponse,
    HintsResponse,
    HistoryResponse,
    SolutionResponse,
    SubmitRequest,
    SubmitResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/math-problem", tags=["math-problem"])

Service = Annotated[ProblemService, Depends(get_problem_service)]


def _relabel(public_message: str, e: MathProblemError) -> MathProblemError:
    if not e.expose_detail:
        logger.error("%s: %s: %s", public_message, type(e).__name__, e.detail)
        e.public_message = public_message
    return e


@router.post("", response_model=GenerateResponse)
async def generate_problem(service: Service, req: Optional[GenerateRequest] = None):
    req = req or GenerateRequest()
    try:
        return await service.generate_problem(req.difficulty, req.problem_type)
    except MathProblemError as e:
        raise _relabel("Failed to generate math problem", e)


@router.get("/hints", response_model=HintsResponse)
async def get_hints(service: Service, session_id: Optional[str] = Query(None, alias="sessionId")):
    try:
        return {"hints": await service.get_hints(session_id)}
    except MathProblemError as e:
        raise _relabel("Failed to generate hints", e)


@router.get("/solution", response_model=SolutionResponse)
async def get_solution(service: Service, session_id: Optional[str] = Query(None, alias="sessionId")):
    try:
        return {"solution": await service.get_solution(session_id)}
    except MathProblemError as e:
        raise _relabel("Failed to generate solution", e)


@router.post("/submit", response_model=SubmitResponse)
async def submit_answer(service: Service, req: SubmitRequest):
    try:
        return await service.submit_answer(req.session_id, req.user_answer)
    except MathProblemError as e:
        raise _relabel("Failed to process submission", e)


@router.get("/history", response_model=HistoryResponse)
def get_history(service: Service, limit: int = HISTORY_DEFAULT_LIMIT):
    try:
        return service.get_history(limit)
    except MathProblemError as e:
        raise _relabel("Failed to fetch user history", e)
