from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import NotFound, PersistenceFailure
from models import Hint, ProblemSession, Submission

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Persistence facade for problem sessions, hints and submissions.

    Built per request around an injected SQLAlchemy session; holds no other state.
    Backend errors are rolled back and re-raised as PersistenceFailure.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception) -> PersistenceFailure:
        self.db.rollback()
        logger.error("Error %s: %s", action, exc)
        return PersistenceFailure(f"Failed to {action}")

    # ---------- sessions ----------

    def create_session(
        self,
        *,
        problem_text: str,
        correct_answer: float,
        difficulty: str,
        problem_type: str,
        score: int,
        hints_available: int,
    ) -> ProblemSession:
        session = ProblemSession(
            problem_text=problem_text,
            correct_answer=correct_answer,
            difficulty=difficulty,
            problem_type=problem_type,
            score=score,
            hints_available=hints_available,
        )
        try:
            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)
        except SQLAlchemyError as e:
            raise self._fail("create math problem session", e) from e
        return session

    def get_session_by_id(self, session_id: str) -> Optional[ProblemSession]:
        try:
            return self.db.get(ProblemSession, session_id)
        except SQLAlchemyError as e:
            raise self._fail("fetch math problem session", e) from e

    def attach_solution(self, session_id: str, text: str) -> str:
        """
        Store the solution unless one is already there; return whichever text is stored.
        The first writer wins, so concurrent callers all see the same solution.
        """
        try:
            res = self.db.execute(
                update(ProblemSession)
                .where(ProblemSession.id == session_id, ProblemSession.solution_steps.is_(None))
                .values(solution_steps=text)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            if res.rowcount == 0:
                logger.info("solution for session %s was already stored", session_id)
            stored = self.db.execute(
                select(ProblemSession.solution_steps).where(ProblemSession.id == session_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("save solution", e) from e
        if stored is None:
            raise NotFound("Problem session not found")
        return stored

    # ---------- hints ----------

    def create_hint(self, session_id: str, hint_text: str, hint_order: int) -> Hint:
        hint = Hint(session_id=session_id, hint_text=hint_text, hint_order=hint_order)
        try:
            self.db.add(hint)
            self.db.commit()
            self.db.refresh(hint)
        except SQLAlchemyError as e:
            raise self._fail("create hint", e) from e
        return hint

    def create_hints(
        self,
        session_id: str,
        texts: Sequence[str],
        orders: Optional[Sequence[int]] = None,
    ) -> Optional[List[Hint]]:
        """
        Insert a whole hint batch in one transaction. Ordinals default to 1..n;
        pass `orders` to fill specific levels of a partial set.

        Returns None when any of those ordinals is already stored; the unique
        (session_id, hint_order) constraint keeps a second writer out.
        """
        hints = [
            Hint(session_id=session_id, hint_text=text, hint_order=i)
            for i, text in zip(orders or range(1, len(texts) + 1), texts)
        ]
        try:
            self.db.add_all(hints)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("hint batch for session %s was already stored", session_id)
            return None
        except SQLAlchemyError as e:
            raise self._fail("save hints", e) from e
        for h in hints:
            self.db.refresh(h)
        return hints

    def get_session_hints(self, session_id: str) -> List[Hint]:
        try:
            return list(
                self.db.scalars(
                    select(Hint).where(Hint.session_id == session_id).order_by(Hint.hint_order.asc())
                )
            )
        except SQLAlchemyError as e:
            raise self._fail("fetch hints", e) from e

    # ---------- submissions ----------

    def create_submission(
        self,
        *,
        session_id: str,
        user_answer: float,
        is_correct: bool,
        feedback_text: str,
    ) -> Submission:
        """
        Record an answer attempt. Points are taken from the stored session, never
        from the caller: the session's score when correct, otherwise 0.
        """
        session = self.get_session_by_id(session_id)
        if session is None:
            raise NotFound("Problem session not found")

        earned = session.score if is_correct else 0
        submission = Submission(
            session_id=session_id,
            user_answer=user_answer,
            is_correct=is_correct,
            feedback_text=feedback_text,
            points_earned=earned,
        )
        try:
            self.db.add(submission)
            self.db.commit()
            self.db.refresh(submission)
        except SQLAlchemyError as e:
            raise self._fail("save submission", e) from e
        return submission

    # ---------- history / score ----------

    def get_user_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent sessions first, each with its latest submission (or None)."""
        try:
            sessions = list(
                self.db.scalars(
                    select(ProblemSession)
                    .order_by(ProblemSession.created_at.desc())
                    .limit(limit)
                )
            )
            ids = [s.id for s in sessions]
            latest: Dict[str, Submission] = {}
            if ids:
                rows = self.db.scalars(
                    select(Submission)
                    .where(Submission.session_id.in_(ids))
                    .order_by(Submission.created_at.desc())
                )
                for sub in rows:
                    latest.setdefault(sub.session_id, sub)
        except SQLAlchemyError as e:
            raise self._fail("fetch user history", e) from e

        history = []
        for s in sessions:
            sub = latest.get(s.id)
            history.append(
                {
                    "session_id": s.id,
                    "problem_text": s.problem_text,
                    "difficulty": s.difficulty,
                    "problem_type": s.problem_type,
                    "created_at": s.created_at,
                    "submission": (
                        {"is_correct": sub.is_correct, "points_earned": sub.points_earned}
                        if sub is not None
                        else None
                    ),
                }
            )
        return history

    def get_user_score(self) -> Dict[str, int]:
        try:
            row = self.db.execute(
                select(
                    func.coalesce(func.sum(Submission.points_earned), 0),
                    func.count(func.distinct(Submission.session_id)),
                    func.count(
                        func.distinct(case((Submission.is_correct.is_(True), Submission.session_id)))
                    ),
                )
            ).one()
        except SQLAlchemyError as e:
            raise self._fail("fetch user score", e) from e
        return {
            "total_score": int(row[0]),
            "problems_attempted": int(row[1]),
            "problems_solved": int(row[2]),
        }
