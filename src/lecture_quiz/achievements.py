"""One-time achievement badges unlocked from profile totals."""
import logging
from dataclasses import dataclass

from lecture_quiz.models import UserProfile
from lecture_quiz.notifications import Notifier, NullNotifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str


# Evaluated in this order.
ACHIEVEMENT_RULES = [
    ("first_quiz", lambda p: p.total_quizzes >= 1),
    ("perfect_score", lambda p: any(r.percentage == 100 for r in p.quiz_history)),
    ("streak_7", lambda p: p.study_streak >= 7),
    ("quiz_master", lambda p: p.total_quizzes >= 10),
    ("century", lambda p: p.total_correct >= 100),
]

ACHIEVEMENTS = {
    "first_quiz": Achievement("first_quiz", "First Quiz", "Complete your first quiz", "🏆"),
    "perfect_score": Achievement("perfect_score", "Perfect Score", "Score 100% on a quiz", "🌟"),
    "streak_7": Achievement("streak_7", "7-Day Streak", "Study 7 days in a row", "🔥"),
    "quiz_master": Achievement("quiz_master", "Quiz Master", "Complete 10 quizzes", "👑"),
    "century": Achievement("century", "Century", "Answer 100 questions correctly", "💯"),
}


def achievement_name(achievement_id: str) -> str:
    achievement = ACHIEVEMENTS.get(achievement_id)
    return achievement.name if achievement else achievement_id


class AchievementEngine:
    def __init__(self, notifier: Notifier = None):
        self.notifier = notifier or NullNotifier()

    def evaluate(self, profile: UserProfile) -> list[str]:
        """Unlock every rule that now holds. Returns the ids unlocked by this call."""
        unlocked = []
        for achievement_id, condition in ACHIEVEMENT_RULES:
            if achievement_id in profile.achievements or not condition(profile):
                continue
            profile.achievements.append(achievement_id)
            unlocked.append(achievement_id)
            logger.info("Achievement unlocked: %s", achievement_id)
            self.notifier.notify(f"New Achievement: {achievement_name(achievement_id)}", "success")
        return unlocked
