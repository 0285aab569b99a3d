"""Progress rollups for the lecture list and analytics screens."""
import math

from lecture_quiz.achievements import ACHIEVEMENT_RULES, ACHIEVEMENTS
from lecture_quiz.catalog import Subject
from lecture_quiz.models import UserProfile, lecture_key, percentage

STAR_THRESHOLDS = ((90, 5), (80, 4), (70, 3), (60, 2), (50, 1))
# Colour bands line up with STAR_THRESHOLDS.
SCORE_COLORS = ((80, "green"), (60, "yellow"), (50, "dark_orange"))


def star_rating(score: int) -> int:
    for threshold, stars in STAR_THRESHOLDS:
        if score >= threshold:
            return stars
    return 0


def get_score_color(score: float) -> str:
    for threshold, color in SCORE_COLORS:
        if score >= threshold:
            return color
    return "red"


def lecture_cards(profile: UserProfile, subject: Subject) -> list[dict]:
    """One card per lecture, rated from its latest attempt."""
    cards = []
    for lecture in subject.lectures:
        attempts = profile.lecture_progress.get(lecture_key(subject.id, lecture.id), [])
        latest = attempts[-1].percentage if attempts else 0
        cards.append({
            "lecture_id": lecture.id,
            "title": lecture.title,
            "duration_minutes": lecture.duration_minutes,
            "question_count": lecture.question_count,
            "topics": list(lecture.topics[:3]),
            "completed": bool(attempts),
            "attempts": len(attempts),
            "latest_percentage": latest,
            "stars": star_rating(latest) if attempts else 0,
        })
    return cards


def subject_overview(profile: UserProfile, subject: Subject) -> dict:
    """Lecture counts and the average of each attempted lecture's mean score."""
    completed = 0
    score_sum = 0.0
    for lecture in subject.lectures:
        attempts = profile.lecture_progress.get(lecture_key(subject.id, lecture.id), [])
        if attempts:
            completed += 1
            score_sum += sum(a.percentage for a in attempts) / len(attempts)
    return {
        "total_lectures": len(subject.lectures),
        "completed_lectures": completed,
        "average_score": math.floor(score_sum / completed + 0.5) if completed else 0,
    }


def analytics(profile: UserProfile) -> dict:
    badges = []
    for achievement_id, _ in ACHIEVEMENT_RULES:
        achievement = ACHIEVEMENTS[achievement_id]
        badges.append({
            "id": achievement.id,
            "name": achievement.name,
            "description": achievement.description,
            "icon": achievement.icon,
            "unlocked": achievement.id in profile.achievements,
        })
    return {
        "total_quizzes": profile.total_quizzes,
        "total_correct": profile.total_correct,
        "total_questions": profile.total_questions,
        "accuracy": percentage(profile.total_correct, profile.total_questions),
        "study_streak": profile.study_streak,
        "achievements": badges,
    }


def subject_performance(profile: UserProfile, catalog: list[Subject]) -> list[dict]:
    rows = []
    for subject in catalog:
        stats = profile.subject_stats.get(subject.id)
        if stats is None or stats.total_quizzes == 0:
            rows.append({"subject_id": subject.id, "name": subject.name, "started": False,
                         "total_quizzes": 0, "best_percentage": 0, "average": 0})
            continue
        rows.append({
            "subject_id": subject.id,
            "name": subject.name,
            "started": True,
            "total_quizzes": stats.total_quizzes,
            "best_percentage": stats.best_percentage,
            "average": percentage(stats.total_score_sum, stats.total_questions_sum),
        })
    return rows
