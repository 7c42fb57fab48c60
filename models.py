from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class ProblemSession(Base):
    __tablename__ = "math_problem_sessions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)
    problem_text: Mapped[str] = mapped_column(Text)
    correct_answer: Mapped[float] = mapped_column(Float)
    difficulty: Mapped[str] = mapped_column(String(16))
    problem_type: Mapped[str] = mapped_column(String(32))
    # NULL until the first solution request; written at most once
    solution_steps: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    score: Mapped[int] = mapped_column(Integer)
    hints_available: Mapped[int] = mapped_column(Integer, default=3)

    hints: Mapped[List["Hint"]] = relationship(
        back_populates="session", order_by="Hint.hint_order"
    )
    submissions: Mapped[List["Submission"]] = relationship(back_populates="session")


class Hint(Base):
    __tablename__ = "math_problem_hints"
    __table_args__ = (
        sa.UniqueConstraint("session_id", "hint_order", name="uq_math_problem_hints_session_order"),
    )
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("math_problem_sessions.id"), index=True
    )
    hint_text: Mapped[str] = mapped_column(Text)
    hint_order: Mapped[int] = mapped_column(Integer)

    session: Mapped[ProblemSession] = relationship(back_populates="hints")


class Submission(Base):
    __tablename__ = "math_problem_submissions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("math_problem_sessions.id"), index=True
    )
    user_answer: Mapped[float] = mapped_column(Float)
    is_correct: Mapped[bool] = mapped_column(sa.Boolean)
    feedback_text: Mapped[str] = mapped_column(Text, default="")
    points_earned: Mapped[int] = mapped_column(Integer, default=0)

    session: Mapped[ProblemSession] = relationship(back_populates="submissions")
