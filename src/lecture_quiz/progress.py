"""Durable user progress: quiz history, per-subject stats, streak and achievements."""
import json
import logging
import sqlite3
from datetime import date, datetime
from typing import Callable

from lecture_quiz.achievements import AchievementEngine
from lecture_quiz.db import PROFILE_KEY, DEFAULT_DB_PATH, get_value, init_db, set_value
from lecture_quiz.errors import StorageUnavailable
from lecture_quiz.models import (
    THEMES, LectureProgressEntry, QuizAttemptResult, SubjectStats, UserProfile,
    lecture_key, percentage,
)
from lecture_quiz.notifications import Notifier, NullNotifier
from lecture_quiz.streak import StudyStreakTracker

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    "quizHistory": "quiz_history",
    "lectureProgress": "lecture_progress",
    "subjectStats": "subject_stats",
    "achievements": "achievements",
    "totalQuizzes": "total_quizzes",
    "totalCorrect": "total_correct",
    "totalQuestions": "total_questions",
    "studyStreak": "study_streak",
    "lastStudyDate": "last_study_date",
    "theme": "theme",
}


class ProgressStore:
    """Sole owner of the user profile. Every change is persisted before returning."""

    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        notifier: Notifier = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db_path = db_path
        self.notifier = notifier or NullNotifier()
        self.clock = clock
        self.streak = StudyStreakTracker()
        self.achievements = AchievementEngine(self.notifier)
        self.profile = UserProfile()

    def _read(self) -> str | None:
        try:
            init_db(self.db_path)
            return get_value(self.db_path, PROFILE_KEY)
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"cannot read profile from {self.db_path}") from e

    def _write(self, payload: str) -> None:
        try:
            init_db(self.db_path)
            set_value(self.db_path, PROFILE_KEY, payload)
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"cannot write profile to {self.db_path}") from e

    def load(self) -> UserProfile:
        """Load the stored profile, falling back to defaults on any problem."""
        self.profile = UserProfile()
        try:
            raw = self._read()
        except StorageUnavailable:
            logger.warning("Profile storage unavailable, starting with defaults", exc_info=True)
            return self.profile
        if raw is None:
            logger.info("No stored profile, starting fresh")
            return self.profile
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"profile is a {type(data).__name__}, expected an object")
            self.profile = UserProfile.from_dict(data)
        except (ValueError, TypeError, KeyError, AttributeError):
            logger.warning("Stored profile is corrupted, starting with defaults", exc_info=True)
            self.profile = UserProfile()
        return self.profile

    def persist(self) -> bool:
        """Write the whole profile once. Failures are logged, never raised."""
        try:
            payload = json.dumps(self.profile.to_dict(), ensure_ascii=False)
            self._write(payload)
        except (TypeError, ValueError, AttributeError):
            logger.error("Could not serialize profile", exc_info=True)
            return False
        except StorageUnavailable:
            logger.error("Could not persist profile", exc_info=True)
            return False
        return True

    def record_quiz_result(
        self,
        subject_id: str,
        lecture_id,
        correct: int,
        total: int,
        elapsed_seconds: int,
    ) -> QuizAttemptResult:
        now = self.clock()
        timestamp = now.isoformat()
        pct = percentage(correct, total)
        profile = self.profile

        result = QuizAttemptResult(
            subject_id=subject_id,
            lecture_id=str(lecture_id),
            correct_count=correct,
            total_count=total,
            percentage=pct,
            elapsed_seconds=int(elapsed_seconds),
            timestamp=timestamp,
        )
        profile.quiz_history.append(result)

        key = lecture_key(subject_id, lecture_id)
        profile.lecture_progress.setdefault(key, []).append(LectureProgressEntry(
            correct_count=correct,
            total_count=total,
            percentage=pct,
            elapsed_seconds=int(elapsed_seconds),
            timestamp=timestamp,
        ))

        stats = profile.subject_stats.setdefault(subject_id, SubjectStats())
        stats.total_quizzes += 1
        stats.total_score_sum += correct
        stats.total_questions_sum += total
        if pct > stats.best_percentage:
            stats.best_percentage = pct

        profile.total_quizzes += 1
        profile.total_correct += correct
        profile.total_questions += total

        self.streak.touch(profile, now)
        self.achievements.evaluate(profile)
        logger.info("Recorded %s lecture %s: %d/%d (%d%%)", subject_id, lecture_id, correct, total, pct)
        self.persist()
        return result

    def record_attempt(self, result: QuizAttemptResult) -> QuizAttemptResult:
        return self.record_quiz_result(
            result.subject_id, result.lecture_id,
            result.correct_count, result.total_count, result.elapsed_seconds,
        )

    def get(self, field: str):
        return getattr(self.profile, self._attr(field))

    def set(self, field: str, value) -> None:
        """Replace one top-level field. Raises ValueError if ``value`` does not fit it."""
        attr = self._attr(field)
        setattr(self.profile, attr, _coerce(attr, value))
        self.persist()

    def toggle_theme(self) -> str:
        theme = "light" if self.profile.theme == "dark" else "dark"
        self.set("theme", theme)
        return theme

    def reset(self) -> None:
        self.profile = UserProfile()
        self.persist()

    @staticmethod
    def _attr(field: str) -> str:
        if field in PROFILE_FIELDS:
            return PROFILE_FIELDS[field]
        if field in PROFILE_FIELDS.values():
            return field
        raise KeyError(field)


COUNTER_FIELDS = ("total_quizzes", "total_correct", "total_questions", "study_streak")


def _coerce(attr: str, value):
    if attr == "theme":
        if value not in THEMES:
            raise ValueError(f"unknown theme: {value!r}")
        return value
    if attr in COUNTER_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{attr} must be a non-negative integer, got {value!r}")
        return value
    if attr == "last_study_date":
        if value is None or isinstance(value, date):
            return value.date() if isinstance(value, datetime) else value
        if isinstance(value, str):
            return date.fromisoformat(value)
        raise ValueError(f"last_study_date must be a date, got {value!r}")
    if attr == "achievements":
        if not isinstance(value, (list, tuple)) or not all(isinstance(a, str) for a in value):
            raise ValueError("achievements must be a list of ids")
        return list(dict.fromkeys(value))
    if attr == "quiz_history":
        if not isinstance(value, list) or not all(isinstance(r, QuizAttemptResult) for r in value):
            raise ValueError("quiz_history must be a list of QuizAttemptResult")
        return value
    if attr == "lecture_progress":
        if not isinstance(value, dict) or not all(
            isinstance(entries, list) and all(isinstance(e, LectureProgressEntry) for e in entries)
            for entries in value.values()
        ):
            raise ValueError("lecture_progress must map keys to lists of LectureProgressEntry")
        return value
    if attr == "subject_stats":
        if not isinstance(value, dict) or not all(isinstance(s, SubjectStats) for s in value.values()):
            raise ValueError("subject_stats must map subject ids to SubjectStats")
        return value
    return value
