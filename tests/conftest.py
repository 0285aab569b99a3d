from datetime import datetime

import pytest

from lecture_quiz.models import Question
from lecture_quiz.notifications import Notifier


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages = []

    def notify(self, message, severity="success"):
        self.messages.append((message, severity))


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_quiz.db")
    return db_path


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 10, 9, 30))


@pytest.fixture
def make_questions():
    """Factory for simple 4-option questions whose correct answer is option ``correct``."""
    def _make(count, lecture_id="1", correct=0):
        return [
            Question(
                lecture_id=str(lecture_id),
                prompt=f"Question {i + 1}?",
                options=("A", "B", "C", "D"),
                correct_option_index=correct,
                category="General",
                difficulty="easy",
                hint=f"Hint {i + 1}",
            )
            for i in range(count)
        ]
    return _make
