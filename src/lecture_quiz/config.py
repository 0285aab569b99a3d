"""
Application configuration read from the environment.

LECTURE_QUIZ_DB            SQLite file holding profile and session state
LECTURE_QUIZ_CONTENT_DIR   directory with subjects.json and questions/
LECTURE_QUIZ_CONTENT_URL   base URL serving questions/{subject}.json (optional)
LECTURE_QUIZ_LOG_LEVEL     DEBUG, INFO, WARNING...
LECTURE_QUIZ_LOG_FORMAT    "text" or "json"
LECTURE_QUIZ_GENERATED_COUNT   size of generated "all lectures" quizzes
LECTURE_QUIZ_RESUME_HOURS  how long an unfinished quiz can be resumed
LECTURE_QUIZ_HTTP_TIMEOUT  seconds before a content request gives up
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from lecture_quiz.db import DEFAULT_DB_PATH

logger = logging.getLogger(__name__)

PACKAGE_CONTENT_DIR = str(Path(__file__).parent / "content")


def _int_env(env: dict, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %d", name, raw, default)
        return default
    return value


def _float_env(env: dict, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, using %s", name, raw, default)
        return default
    return value if value > 0 else default


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    content_dir: str = PACKAGE_CONTENT_DIR
    content_url: Optional[str] = None
    log_level: str = "WARNING"
    log_format: str = "text"
    generated_count: int = 50
    resume_hours: int = 24
    http_timeout: float = 10.0

    @classmethod
    def from_env(cls, env: dict = None) -> "Settings":
        env = os.environ if env is None else env
        log_format = env.get("LECTURE_QUIZ_LOG_FORMAT", "text").lower()
        if log_format not in ("text", "json"):
            logger.warning("Unknown log format %r, using text", log_format)
            log_format = "text"
        return cls(
            db_path=os.path.expanduser(env.get("LECTURE_QUIZ_DB", DEFAULT_DB_PATH)),
            content_dir=os.path.expanduser(env.get("LECTURE_QUIZ_CONTENT_DIR", PACKAGE_CONTENT_DIR)),
            content_url=env.get("LECTURE_QUIZ_CONTENT_URL") or None,
            log_level=env.get("LECTURE_QUIZ_LOG_LEVEL", "WARNING").upper(),
            log_format=log_format,
            generated_count=_int_env(env, "LECTURE_QUIZ_GENERATED_COUNT", 50),
            resume_hours=_int_env(env, "LECTURE_QUIZ_RESUME_HOURS", 24),
            http_timeout=_float_env(env, "LECTURE_QUIZ_HTTP_TIMEOUT", 10.0),
        )
