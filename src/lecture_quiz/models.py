"""Data classes for the quiz domain model."""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
THEMES = ("light", "dark")


def percentage(correct: int, total: int) -> int:
    """Whole-number score, rounded half up. Zero when there is nothing to score."""
    if total <= 0:
        return 0
    # Integer form of floor(correct * 100 / total + 0.5)
    return (correct * 200 + total) // (2 * total)


def lecture_key(subject_id: str, lecture_id) -> str:
    return f"{subject_id}_{lecture_id}"


@dataclass(frozen=True)
class Question:
    lecture_id: str
    prompt: str
    options: tuple
    correct_option_index: int
    category: str = ""
    difficulty: str = "medium"
    hint: str = ""

    def __post_init__(self):
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError(f"correct option {self.correct_option_index} out of range")
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"unknown difficulty: {self.difficulty!r}")

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """Build from a content record (``lecture``, ``question``, ``correct``...)."""
        return cls(
            lecture_id=str(data["lecture"]),
            prompt=data["question"],
            options=tuple(data["options"]),
            correct_option_index=int(data["correct"]),
            category=data.get("category", ""),
            difficulty=data.get("difficulty", "medium"),
            hint=data.get("hint", ""),
        )

    def to_dict(self) -> dict:
        return {
            "lecture": self.lecture_id,
            "question": self.prompt,
            "category": self.category,
            "difficulty": self.difficulty,
            "hint": self.hint,
            "options": list(self.options),
            "correct": self.correct_option_index,
        }


@dataclass(frozen=True)
class QuizAttemptResult:
    subject_id: str
    lecture_id: str
    correct_count: int
    total_count: int
    percentage: int
    elapsed_seconds: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "subjectId": self.subject_id,
            "lectureId": self.lecture_id,
            "score": self.correct_count,
            "total": self.total_count,
            "percentage": self.percentage,
            "time": self.elapsed_seconds,
            "date": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizAttemptResult":
        return cls(
            subject_id=str(data["subjectId"]),
            lecture_id=str(data["lectureId"]),
            correct_count=int(data["score"]),
            total_count=int(data["total"]),
            percentage=int(data["percentage"]),
            elapsed_seconds=int(data.get("time", 0)),
            timestamp=data.get("date", ""),
        )


@dataclass(frozen=True)
class LectureProgressEntry:
    correct_count: int
    total_count: int
    percentage: int
    elapsed_seconds: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "score": self.correct_count,
            "total": self.total_count,
            "percentage": self.percentage,
            "time": self.elapsed_seconds,
            "date": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LectureProgressEntry":
        return cls(
            correct_count=int(data["score"]),
            total_count=int(data["total"]),
            percentage=int(data["percentage"]),
            elapsed_seconds=int(data.get("time", 0)),
            timestamp=data.get("date", ""),
        )


@dataclass
class SubjectStats:
    total_quizzes: int = 0
    total_score_sum: int = 0
    total_questions_sum: int = 0
    best_percentage: int = 0

    @property
    def average(self) -> float:
        if not self.total_questions_sum:
            return 0.0
        return self.total_score_sum / self.total_questions_sum

    def to_dict(self) -> dict:
        return {
            "totalQuizzes": self.total_quizzes,
            "totalScore": self.total_score_sum,
            "totalQuestions": self.total_questions_sum,
            "bestScore": self.best_percentage,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SubjectStats":
        return cls(
            total_quizzes=int(data.get("totalQuizzes", 0)),
            total_score_sum=int(data.get("totalScore", 0)),
            total_questions_sum=int(data.get("totalQuestions", 0)),
            best_percentage=int(data.get("bestScore", 0)),
        )


@dataclass
class UserProfile:
    quiz_history: list = field(default_factory=list)
    lecture_progress: dict = field(default_factory=dict)
    subject_stats: dict = field(default_factory=dict)
    achievements: list = field(default_factory=list)
    total_quizzes: int = 0
    total_correct: int = 0
    total_questions: int = 0
    study_streak: int = 0
    last_study_date: Optional[date] = None
    theme: str = "light"

    def to_dict(self) -> dict:
        return {
            "quizHistory": [r.to_dict() for r in self.quiz_history],
            "lectureProgress": {
                key: [e.to_dict() for e in entries]
                for key, entries in self.lecture_progress.items()
            },
            "subjectStats": {sid: s.to_dict() for sid, s in self.subject_stats.items()},
            "achievements": list(self.achievements),
            "totalQuizzes": self.total_quizzes,
            "totalCorrect": self.total_correct,
            "totalQuestions": self.total_questions,
            "studyStreak": self.study_streak,
            "lastStudyDate": self.last_study_date.isoformat() if self.last_study_date else None,
            "theme": self.theme,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        """Merge a stored document over the defaults.

        Missing or unreadable fields keep their default and malformed records
        are skipped, so one bad entry never costs the rest of the profile.
        """
        profile = cls()
        if isinstance(data.get("quizHistory"), list):
            profile.quiz_history = _parse_records(data["quizHistory"], QuizAttemptResult.from_dict, "quizHistory")
        if isinstance(data.get("lectureProgress"), dict):
            profile.lecture_progress = {
                key: _parse_records(entries, LectureProgressEntry.from_dict, f"lectureProgress.{key}")
                for key, entries in data["lectureProgress"].items()
                if isinstance(entries, list)
            }
        if isinstance(data.get("subjectStats"), dict):
            for sid, stats in data["subjectStats"].items():
                try:
                    profile.subject_stats[sid] = SubjectStats.from_dict(stats)
                except (TypeError, ValueError, AttributeError) as e:
                    logger.warning("Skipping stats for %s: %s", sid, e)
        if isinstance(data.get("achievements"), list):
            # dict.fromkeys keeps first-seen order and drops duplicates
            profile.achievements = list(dict.fromkeys(a for a in data["achievements"] if isinstance(a, str)))
        for key, attr in (
            ("totalQuizzes", "total_quizzes"),
            ("totalCorrect", "total_correct"),
            ("totalQuestions", "total_questions"),
            ("studyStreak", "study_streak"),
        ):
            if data.get(key) is None:
                continue
            try:
                setattr(profile, attr, int(data[key]))
            except (TypeError, ValueError):
                logger.warning("Ignoring unreadable %s=%r", key, data[key])
        if data.get("lastStudyDate"):
            try:
                profile.last_study_date = date.fromisoformat(data["lastStudyDate"])
            except (TypeError, ValueError):
                logger.warning("Ignoring unreadable lastStudyDate=%r", data["lastStudyDate"])
        if data.get("theme") in THEMES:
            profile.theme = data["theme"]
        return profile


def _parse_records(items: list, parse, label: str) -> list:
    records = []
    for i, item in enumerate(items):
        try:
            records.append(parse(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping %s record #%d: %s", label, i + 1, e)
    return records
