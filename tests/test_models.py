"""Tests for data model classes."""
import math
from datetime import date
from fractions import Fraction

import pytest

from lecture_quiz.models import (
    LectureProgressEntry, Question, QuizAttemptResult, SubjectStats, UserProfile,
    lecture_key, percentage,
)


def test_percentage_rounds_half_up():
    assert percentage(7, 10) == 70
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(2, 3) == 67
    assert percentage(1, 3) == 33


def test_percentage_bounds():
    for total in range(1, 30):
        for correct in range(total + 1):
            pct = percentage(correct, total)
            assert 0 <= pct <= 100
            assert pct == math.floor(Fraction(correct * 100, total) + Fraction(1, 2))


def test_percentage_zero_total():
    assert percentage(0, 0) == 0
    assert percentage(5, 0) == 0


def test_lecture_key():
    assert lecture_key("crypto", 1) == "crypto_1"
    assert lecture_key("crypto", "all") == "crypto_all"


def test_question_from_content_record():
    q = Question.from_dict({
        "lecture": 2, "question": "What is AES?", "category": "Block Ciphers",
        "difficulty": "medium", "hint": "A standard", "options": ["x", "y", "z"], "correct": 1,
    })
    assert q.lecture_id == "2"
    assert q.prompt == "What is AES?"
    assert q.options == ("x", "y", "z")
    assert q.correct_option == "y"


def test_question_defaults():
    q = Question(lecture_id="1", prompt="Q?", options=("a", "b"), correct_option_index=0)
    assert q.difficulty == "medium"
    assert q.hint == ""
    assert q.category == ""


def test_question_rejects_bad_correct_index():
    with pytest.raises(ValueError):
        Question(lecture_id="1", prompt="Q?", options=("a", "b"), correct_option_index=2)


def test_question_rejects_single_option():
    with pytest.raises(ValueError):
        Question(lecture_id="1", prompt="Q?", options=("a",), correct_option_index=0)


def test_question_rejects_unknown_difficulty():
    with pytest.raises(ValueError):
        Question(lecture_id="1", prompt="Q?", options=("a", "b"), correct_option_index=0, difficulty="extreme")


def test_question_is_immutable():
    q = Question(lecture_id="1", prompt="Q?", options=("a", "b"), correct_option_index=0)
    with pytest.raises(AttributeError):
        q.prompt = "changed"


def test_subject_stats_average():
    assert SubjectStats().average == 0.0
    assert SubjectStats(total_quizzes=2, total_score_sum=15, total_questions_sum=20).average == 0.75


def test_user_profile_defaults():
    p = UserProfile()
    assert p.quiz_history == []
    assert p.achievements == []
    assert p.study_streak == 0
    assert p.last_study_date is None
    assert p.theme == "light"


def test_user_profile_round_trip():
    p = UserProfile(
        quiz_history=[QuizAttemptResult("crypto", "1", 7, 10, 70, 95, "2024-03-10T09:30:00")],
        lecture_progress={"crypto_1": [LectureProgressEntry(7, 10, 70, 95, "2024-03-10T09:30:00")]},
        subject_stats={"crypto": SubjectStats(1, 7, 10, 70)},
        achievements=["first_quiz"],
        total_quizzes=1,
        total_correct=7,
        total_questions=10,
        study_streak=3,
        last_study_date=date(2024, 3, 10),
        theme="dark",
    )
    assert UserProfile.from_dict(p.to_dict()) == p


def test_user_profile_uses_stored_field_names():
    data = UserProfile(total_quizzes=2, last_study_date=date(2024, 1, 5)).to_dict()
    assert data["totalQuizzes"] == 2
    assert data["lastStudyDate"] == "2024-01-05"
    assert "quizHistory" in data


def test_user_profile_merges_over_defaults():
    p = UserProfile.from_dict({"totalQuizzes": 4, "somethingElse": True})
    assert p.total_quizzes == 4
    assert p.total_correct == 0
    assert p.quiz_history == []
    assert p.theme == "light"


def test_user_profile_drops_duplicate_achievements():
    p = UserProfile.from_dict({"achievements": ["first_quiz", "century", "first_quiz"]})
    assert p.achievements == ["first_quiz", "century"]


def test_user_profile_ignores_unknown_theme():
    assert UserProfile.from_dict({"theme": "sepia"}).theme == "light"


def test_user_profile_skips_bad_history_record():
    good = {"subjectId": "crypto", "lectureId": "1", "score": 7, "total": 10, "percentage": 70, "time": 95, "date": "2024-03-10T09:30:00"}
    p = UserProfile.from_dict({
        "quizHistory": [{"subjectId": "crypto", "lectureId": "2", "score": 3, "total": 5}, good],
        "lectureProgress": {"crypto_1": [{"score": 1}, {"score": 7, "total": 10, "percentage": 70}], "crypto_2": "oops"},
        "subjectStats": {"crypto": {"totalQuizzes": 2}, "networks": "oops"},
        "totalQuizzes": 42,
        "achievements": ["first_quiz", "century"],
        "theme": "dark",
    })
    assert len(p.quiz_history) == 1
    assert p.quiz_history[0].percentage == 70
    assert len(p.lecture_progress["crypto_1"]) == 1
    assert "crypto_2" not in p.lecture_progress
    assert set(p.subject_stats) == {"crypto"}
    assert p.total_quizzes == 42
    assert p.achievements == ["first_quiz", "century"]
    assert p.theme == "dark"


def test_user_profile_ignores_unreadable_scalars():
    p = UserProfile.from_dict({"totalCorrect": "many", "studyStreak": 3, "lastStudyDate": "yesterday"})
    assert p.total_correct == 0
    assert p.study_streak == 3
    assert p.last_study_date is None
