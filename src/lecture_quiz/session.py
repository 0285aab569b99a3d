"""Quiz session state machine and resumable snapshots."""
import json
import logging
import random
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from lecture_quiz.db import SESSION_KEY, DEFAULT_DB_PATH, delete_value, get_value, init_db, set_value
from lecture_quiz.errors import (
    EmptyQuestionSet, InvalidAnswerIndex, InvalidNavigationIndex, InvalidSessionState,
)
from lecture_quiz.models import Question, QuizAttemptResult, percentage

logger = logging.getLogger(__name__)

RESUME_WINDOW = timedelta(hours=24)


class SessionStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class ReviewItem:
    number: int
    question: Question
    chosen_index: Optional[int]

    @property
    def answered(self) -> bool:
        return self.chosen_index is not None

    @property
    def is_correct(self) -> bool:
        return self.chosen_index == self.question.correct_option_index

    @property
    def chosen_option(self) -> str | None:
        return None if self.chosen_index is None else self.question.options[self.chosen_index]


class QuizSession:
    """One pass through a question set: NOT_STARTED -> IN_PROGRESS -> SUBMITTED."""

    def __init__(self, subject_id: str, lecture_id, clock: Callable[[], datetime] = datetime.now):
        self.subject_id = subject_id
        self.lecture_id = str(lecture_id)
        self.clock = clock
        self.status = SessionStatus.NOT_STARTED
        self.questions: list[Question] = []
        self.answers: list[Optional[int]] = []
        self.bookmarked: set[int] = set()
        self.current_index = 0
        self.start_timestamp: Optional[datetime] = None
        self.result: Optional[QuizAttemptResult] = None

    def _require(self, *allowed: SessionStatus) -> None:
        if self.status not in allowed:
            raise InvalidSessionState(f"not allowed while session is {self.status.value}")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.questions):
            raise InvalidNavigationIndex(index, len(self.questions))

    def start(self, questions) -> None:
        questions = list(questions)
        if not questions:
            raise EmptyQuestionSet(f"no questions for {self.subject_id} lecture {self.lecture_id}")
        self.questions = questions
        self.answers = [None] * len(questions)
        self.bookmarked = set()
        self.current_index = 0
        self.start_timestamp = self.clock()
        self.result = None
        self.status = SessionStatus.IN_PROGRESS
        logger.info("Started %s lecture %s with %d questions", self.subject_id, self.lecture_id, len(questions))

    def restart(self, rng: random.Random = None) -> None:
        """Retry the same questions in a new order."""
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.SUBMITTED)
        questions = list(self.questions)
        (rng or random.Random()).shuffle(questions)
        self.start(questions)

    @property
    def current_question(self) -> Question:
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.SUBMITTED)
        return self.questions[self.current_index]

    def record_answer(self, option_index: int) -> None:
        self._require(SessionStatus.IN_PROGRESS)
        option_count = len(self.questions[self.current_index].options)
        if not 0 <= option_index < option_count:
            raise InvalidAnswerIndex(option_index, option_count)
        self.answers[self.current_index] = option_index

    def go_to(self, index: int) -> None:
        self._require(SessionStatus.IN_PROGRESS)
        self._check_index(index)
        self.current_index = index
        logger.debug("Moved to question %d", index + 1)

    def next(self) -> bool:
        self._require(SessionStatus.IN_PROGRESS)
        if self.current_index >= len(self.questions) - 1:
            return False
        self.current_index += 1
        return True

    def previous(self) -> bool:
        self._require(SessionStatus.IN_PROGRESS)
        if self.current_index == 0:
            return False
        self.current_index -= 1
        return True

    def toggle_bookmark(self, index: int) -> bool:
        """Flip the bookmark on question ``index``. Returns whether it is now bookmarked."""
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.SUBMITTED)
        self._check_index(index)
        if index in self.bookmarked:
            self.bookmarked.discard(index)
            return False
        self.bookmarked.add(index)
        return True

    def is_answered(self, index: int) -> bool:
        return self.answers[index] is not None

    def unanswered_count(self) -> int:
        return sum(1 for a in self.answers if a is None)

    def correct_count(self) -> int:
        return sum(1 for q, a in zip(self.questions, self.answers) if a == q.correct_option_index)

    def elapsed_seconds(self, now: datetime = None) -> int:
        if self.start_timestamp is None:
            return 0
        delta = (now or self.clock()) - self.start_timestamp
        return max(0, round(delta.total_seconds()))

    def submit(self) -> QuizAttemptResult:
        self._require(SessionStatus.IN_PROGRESS)
        now = self.clock()
        correct = self.correct_count()
        total = len(self.questions)
        self.status = SessionStatus.SUBMITTED
        self.result = QuizAttemptResult(
            subject_id=self.subject_id,
            lecture_id=self.lecture_id,
            correct_count=correct,
            total_count=total,
            percentage=percentage(correct, total),
            elapsed_seconds=self.elapsed_seconds(now),
            timestamp=now.isoformat(),
        )
        logger.info("Submitted %s lecture %s: %d/%d", self.subject_id, self.lecture_id, correct, total)
        return self.result

    def review(self) -> list[ReviewItem]:
        return [
            ReviewItem(number=i + 1, question=q, chosen_index=a)
            for i, (q, a) in enumerate(zip(self.questions, self.answers))
        ]

    def to_snapshot(self) -> dict:
        return {
            "subjectId": self.subject_id,
            "lectureId": self.lecture_id,
            "status": self.status.value,
            "questions": [q.to_dict() for q in self.questions],
            "currentIndex": self.current_index,
            "answers": list(self.answers),
            "bookmarked": sorted(self.bookmarked),
            "startTime": self.start_timestamp.isoformat() if self.start_timestamp else None,
        }

    @classmethod
    def from_snapshot(cls, data: dict, clock: Callable[[], datetime] = datetime.now) -> "QuizSession":
        """Rebuild an in-progress session. Raises ValueError if the snapshot is inconsistent."""
        session = cls(data["subjectId"], data["lectureId"], clock=clock)
        questions = [Question.from_dict(q) for q in data["questions"]]
        answers = list(data["answers"])
        if not questions or len(answers) != len(questions):
            raise ValueError("snapshot answers do not match its questions")
        index = int(data.get("currentIndex", 0))
        if not 0 <= index < len(questions):
            raise ValueError(f"snapshot index {index} out of range")
        for q, a in zip(questions, answers):
            if a is not None and not 0 <= a < len(q.options):
                raise ValueError(f"snapshot answer {a} out of range")
        bookmarked = {int(i) for i in data.get("bookmarked", [])}
        if any(not 0 <= i < len(questions) for i in bookmarked):
            raise ValueError("snapshot bookmark out of range")

        session.questions = questions
        session.answers = answers
        session.current_index = index
        session.bookmarked = bookmarked
        session.start_timestamp = datetime.fromisoformat(data["startTime"])
        session.status = SessionStatus(data.get("status", SessionStatus.IN_PROGRESS.value))
        return session


class SessionSnapshotStore:
    """Keeps the unfinished quiz so it can be resumed within the resume window."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH, resume_window: timedelta = RESUME_WINDOW):
        self.db_path = db_path
        self.resume_window = resume_window

    def save(self, session: QuizSession) -> bool:
        if session.status is not SessionStatus.IN_PROGRESS:
            return False
        try:
            init_db(self.db_path)
            set_value(self.db_path, SESSION_KEY, json.dumps(session.to_snapshot(), ensure_ascii=False))
        except (sqlite3.Error, OSError):
            logger.warning("Could not save session snapshot", exc_info=True)
            return False
        return True

    def load(self, now: datetime = None, clock: Callable[[], datetime] = datetime.now) -> QuizSession | None:
        now = now or clock()
        try:
            init_db(self.db_path)
            raw = get_value(self.db_path, SESSION_KEY)
        except (sqlite3.Error, OSError):
            logger.warning("Could not read session snapshot", exc_info=True)
            return None
        if raw is None:
            return None
        try:
            session = QuizSession.from_snapshot(json.loads(raw), clock=clock)
        except (ValueError, TypeError, KeyError, AttributeError):
            logger.warning("Discarding unreadable session snapshot", exc_info=True)
            self.clear()
            return None
        if session.status is not SessionStatus.IN_PROGRESS:
            self.clear()
            return None
        if now - session.start_timestamp >= self.resume_window:
            logger.info("Discarding session snapshot started %s", session.start_timestamp.isoformat())
            self.clear()
            return None
        return session

    def clear(self) -> None:
        try:
            init_db(self.db_path)
            delete_value(self.db_path, SESSION_KEY)
        except (sqlite3.Error, OSError):
            logger.warning("Could not clear session snapshot", exc_info=True)
