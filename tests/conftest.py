"""
Pytest fixtures: an in-memory SQLite database and a scripted stand-in for Gemini,
wired into the app through FastAPI dependency overrides.
"""

import json
import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from db import Base
from deps.services import get_db, get_generator
from errors import GenerationFailure
from main import app
from store import SessionStore

PROBLEM_JSON = {
    "problem_text": "Mia has 25 stickers and buys 17 more. How many stickers does she have now?",
    "correct_answer": 42,
    "hints": [
        "What do you need to find?",
        "Combine the two amounts.",
        "Add 25 and 17 together.",
    ],
}

_HINT_LEVEL_RE = re.compile(r"Current Hint Level: (\d)")


class FakeGenerator:
    """Answers each prompt kind with canned text and records every call."""

    def __init__(self):
        self.calls = []
        self.problem_response = json.dumps(PROBLEM_JSON)
        self.fail = False

    def prompts(self, marker: str) -> list:
        return [p for p, _ in self.calls if marker in p]

    async def generate(self, prompt, config=None):
        self.calls.append((prompt, config))
        if self.fail:
            raise GenerationFailure("Failed to generate response from AI")
        if prompt.startswith("Generate a Primary 5 level math word problem"):
            return self.problem_response
        m = _HINT_LEVEL_RE.search(prompt)
        if m:
            return f"Hint level {m.group(1)}"
        if "step-by-step solution" in prompt:
            return "1. Add 25 and 17.\n2. 25 + 17 = 42.\n3. Mia has 42 stickers."
        if "Is Correct: true" in prompt:
            return "Great job, that's right!"
        return "Not quite. Check your addition and try again."


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture
def store(db):
    return SessionStore(db)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def client(session_factory, generator):
    def _get_db():
        with session_factory() as s:
            yield s

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_session(store):
    def _make(**overrides):
        fields = {
            "problem_text": PROBLEM_JSON["problem_text"],
            "correct_answer": 42.0,
            "difficulty": "easy",
            "problem_type": "addition",
            "score": 10,
            "hints_available": 3,
        }
        fields.update(overrides)
        return store.create_session(**fields)

    return _make
