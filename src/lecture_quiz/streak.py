"""Daily study streak tracking."""
import logging
from datetime import datetime

from lecture_quiz.models import UserProfile

logger = logging.getLogger(__name__)


class StudyStreakTracker:
    """Counts consecutive calendar days with at least one recorded attempt."""

    def touch(self, profile: UserProfile, now: datetime) -> int:
        today = now.date()
        last = profile.last_study_date
        if last == today:
            return profile.study_streak

        if last is None:
            profile.study_streak = 1
        else:
            day_diff = abs((today - last).days)
            if day_diff == 1:
                profile.study_streak += 1
            else:
                profile.study_streak = 1
        profile.last_study_date = today
        logger.debug("Study streak now %d day(s)", profile.study_streak)
        return profile.study_streak
