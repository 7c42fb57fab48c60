"""
Problem lifecycle: generate, hint, submit, solve.

Coordinates prompt building, Gemini calls and the session store. Holds no
state between requests; everything durable goes through SessionStore.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

from fastapi.concurrency import run_in_threadpool

from ai import FEEDBACK_CONFIG, HINT_CONFIG, PROBLEM_CONFIG, SOLUTION_CONFIG, GenerationConfig
from errors import InvalidParameter, NotFound, PersistenceFailure
from models import Hint, ProblemSession
from numeric import answers_match, to_number
from parsing import extract_problem, parse_model_json
from prompts import (
    HINT_LEVELS,
    SCORE_VALUES,
    Difficulty,
    ProblemType,
    build_feedback_prompt,
    build_hint_prompt,
    build_problem_prompt,
    build_solution_prompt,
    coerce_difficulty,
    coerce_problem_type,
)
from store import SessionStore

logger = logging.getLogger(__name__)

HISTORY_DEFAULT_LIMIT = 10
HISTORY_MAX_LIMIT = 100


class TextGenerator(Protocol):
    async def generate(self, prompt: str, config: GenerationConfig = ...) -> str: ...


def _hint_dict(h: Hint) -> Dict[str, Any]:
    return {"id": h.id, "hint_text": h.hint_text, "hint_order": h.hint_order}


class ProblemService:
    """
    Store calls are synchronous SQLAlchemy; the async operations hand each one
    to the threadpool so a slow query suspends the request instead of the loop.
    """

    def __init__(self, store: SessionStore, generator: TextGenerator):
        self.store = store
        self.generator = generator

    async def _require_session(self, session_id: Optional[str]) -> ProblemSession:
        if not session_id:
            raise InvalidParameter("Missing sessionId parameter")
        session = await run_in_threadpool(self.store.get_session_by_id, session_id)
        if session is None:
            raise NotFound("Problem session not found")
        return session

    # ---------- generate ----------

    async def generate_problem(
        self,
        difficulty: Any = Difficulty.MEDIUM,
        problem_type: Any = ProblemType.ADDITION,
    ) -> Dict[str, Any]:
        d = coerce_difficulty(difficulty)
        p = coerce_problem_type(problem_type)

        raw = await self.generator.generate(build_problem_prompt(d, p), PROBLEM_CONFIG)
        generated = extract_problem(parse_model_json(raw))

        session = await run_in_threadpool(
            self.store.create_session,
            problem_text=generated.problem_text,
            correct_answer=generated.correct_answer,
            difficulty=d.value,
            problem_type=p.value,
            score=SCORE_VALUES[d],
            hints_available=len(HINT_LEVELS),
        )
        sid = session.id
        logger.info("created session %s (%s/%s)", sid, d.value, p.value)
        result = {
            "problem_text": session.problem_text,
            "correct_answer": session.correct_answer,
            "session_id": sid,
            "difficulty": session.difficulty,
            "problem_type": session.problem_type,
            "hints_available": session.hints_available,
            "score_value": session.score,
        }

        # Only an exact batch is stored; anything else is regenerated on the first hint request.
        if len(generated.hints) == len(HINT_LEVELS):
            try:
                await run_in_threadpool(self.store.create_hints, sid, generated.hints)
            except PersistenceFailure:
                logger.exception("session %s saved without its suggested hints", sid)
        elif generated.hints:
            logger.info("ignoring %d suggested hints for session %s", len(generated.hints), sid)
        return result

    # ---------- hints ----------

    async def get_hints(self, session_id: Optional[str]) -> List[Dict[str, Any]]:
        session = await self._require_session(session_id)

        sid = session.id
        existing = await run_in_threadpool(self.store.get_session_hints, sid)
        have = {h.hint_order for h in existing}
        missing = [level for level in HINT_LEVELS if level not in have]
        if not missing:
            return [_hint_dict(h) for h in existing]

        # every missing level at once, joined before anything is written
        texts = await asyncio.gather(
            *(
                self.generator.generate(
                    build_hint_prompt(
                        session.problem_text, session.difficulty, session.problem_type, level
                    ),
                    HINT_CONFIG,
                )
                for level in missing
            )
        )

        saved = await run_in_threadpool(self.store.create_hints, sid, texts, missing)
        if saved is None:
            logger.info("serving hints stored by a concurrent request for %s", sid)
        hints = await run_in_threadpool(self.store.get_session_hints, sid)
        return [_hint_dict(h) for h in hints]

    # ---------- submit ----------

    async def submit_answer(self, session_id: Optional[str], user_answer: Any) -> Dict[str, Any]:
        if not session_id or user_answer is None:
            raise InvalidParameter("Missing required fields: session_id and user_answer")
        try:
            answer = to_number(user_answer)
        except ValueError as e:
            raise InvalidParameter(f"Invalid user_answer: {e}")

        session = await run_in_threadpool(self.store.get_session_by_id, session_id)
        if session is None:
            raise NotFound("Problem session not found")

        is_correct = answers_match(answer, session.correct_answer)
        feedback = await self.generator.generate(
            build_feedback_prompt(session.problem_text, session.correct_answer, answer, is_correct),
            FEEDBACK_CONFIG,
        )

        submission = await run_in_threadpool(
            self.store.create_submission,
            session_id=session.id,
            user_answer=answer,
            is_correct=is_correct,
            feedback_text=feedback,
        )
        return {
            "is_correct": submission.is_correct,
            "feedback": submission.feedback_text,
            "points_earned": submission.points_earned,
        }

    # ---------- solution ----------

    async def get_solution(self, session_id: Optional[str]) -> str:
        session = await self._require_session(session_id)
        if session.solution_steps:
            return session.solution_steps

        solution = await self.generator.generate(
            build_solution_prompt(
                session.problem_text,
                session.difficulty,
                session.problem_type,
                session.correct_answer,
            ),
            SOLUTION_CONFIG,
        )
        return await run_in_threadpool(self.store.attach_solution, session.id, solution)

    # ---------- history ----------

    # sync on purpose: the history route is a plain def, which FastAPI already runs in the threadpool
    def get_history(self, limit: int = HISTORY_DEFAULT_LIMIT) -> Dict[str, Any]:
        limit = max(1, min(limit, HISTORY_MAX_LIMIT))
        return {
            "history": self.store.get_user_history(limit),
            "score": self.store.get_user_score(),
        }
