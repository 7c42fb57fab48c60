from datetime import UTC, datetime, timedelta

import pytest

from errors import NotFound
from models import Hint


def test_create_and_get_session(store, make_session):
    s = make_session(difficulty="hard", problem_type="division", score=30)
    got = store.get_session_by_id(s.id)
    assert got is not None
    assert got.difficulty == "hard"
    assert got.problem_type == "division"
    assert got.score == 30
    assert got.solution_steps is None
    assert got.created_at is not None


def test_get_missing_session_returns_none(store):
    assert store.get_session_by_id("does-not-exist") is None


def test_submission_points_come_from_session(store, make_session):
    s = make_session(score=20)
    right = store.create_submission(
        session_id=s.id, user_answer=42, is_correct=True, feedback_text="yes"
    )
    wrong = store.create_submission(
        session_id=s.id, user_answer=41, is_correct=False, feedback_text="no"
    )
    assert right.points_earned == 20
    assert wrong.points_earned == 0


def test_submission_for_unknown_session(store):
    with pytest.raises(NotFound):
        store.create_submission(
            session_id="nope", user_answer=1, is_correct=True, feedback_text=""
        )


def test_hint_batch_ordinals_and_single_writer(store, make_session):
    s = make_session()
    saved = store.create_hints(s.id, ["first", "second", "third"])
    assert [h.hint_order for h in saved] == [1, 2, 3]

    # a second batch for the same session is refused, the first one stays intact
    assert store.create_hints(s.id, ["x", "y", "z"]) is None
    hints = store.get_session_hints(s.id)
    assert [(h.hint_order, h.hint_text) for h in hints] == [
        (1, "first"),
        (2, "second"),
        (3, "third"),
    ]


def test_hint_batch_fills_given_ordinals(store, make_session):
    s = make_session()
    store.create_hint(s.id, "first", 1)
    saved = store.create_hints(s.id, ["second", "third"], orders=[2, 3])
    assert [h.hint_order for h in saved] == [2, 3]
    assert [h.hint_text for h in store.get_session_hints(s.id)] == ["first", "second", "third"]


def test_get_session_hints_ordered(store, make_session, db):
    s = make_session()
    store.create_hint(s.id, "third", 3)
    store.create_hint(s.id, "first", 1)
    store.create_hint(s.id, "second", 2)
    assert [h.hint_text for h in store.get_session_hints(s.id)] == ["first", "second", "third"]
    assert db.query(Hint).count() == 3


def test_attach_solution_first_writer_wins(store, make_session):
    s = make_session()
    assert store.attach_solution(s.id, "1. first") == "1. first"
    assert store.attach_solution(s.id, "1. second") == "1. first"
    store.db.expire_all()
    assert store.get_session_by_id(s.id).solution_steps == "1. first"


def test_attach_solution_unknown_session(store):
    with pytest.raises(NotFound):
        store.attach_solution("nope", "text")


def test_history_and_score(store, make_session, db):
    older = make_session(problem_text="older", score=10)
    newer = make_session(problem_text="newer", difficulty="medium", score=20)
    untouched = make_session(problem_text="untouched")
    base = datetime.now(UTC)
    older.created_at = base - timedelta(minutes=3)
    newer.created_at = base - timedelta(minutes=2)
    untouched.created_at = base - timedelta(minutes=1)
    db.commit()

    first_try = store.create_submission(
        session_id=older.id, user_answer=1, is_correct=False, feedback_text=""
    )
    first_try.created_at = base - timedelta(seconds=30)
    db.commit()
    store.create_submission(session_id=older.id, user_answer=42, is_correct=True, feedback_text="")
    store.create_submission(session_id=newer.id, user_answer=3, is_correct=False, feedback_text="")

    history = store.get_user_history(10)
    assert [h["problem_text"] for h in history] == ["untouched", "newer", "older"]
    assert history[0]["submission"] is None
    assert history[1]["submission"] == {"is_correct": False, "points_earned": 0}
    assert history[2]["submission"]["points_earned"] == 10

    assert len(store.get_user_history(2)) == 2

    assert store.get_user_score() == {
        "total_score": 10,
        "problems_attempted": 2,
        "problems_solved": 1,
    }


def test_score_when_empty(store):
    assert store.get_user_score() == {
        "total_score": 0,
        "problems_attempted": 0,
        "problems_solved": 0,
    }
