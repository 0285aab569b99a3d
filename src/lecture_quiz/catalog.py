"""Subjects and their lectures, loaded from content/subjects.json."""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from lecture_quiz.config import PACKAGE_CONTENT_DIR

logger = logging.getLogger(__name__)

ALL_LECTURES = "all"


@dataclass(frozen=True)
class Lecture:
    id: int
    title: str
    duration_minutes: int = 0
    question_count: int = 10
    topics: tuple = ()


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    description: str = ""
    lectures: tuple = field(default_factory=tuple)

    def get_lecture(self, lecture_id) -> Lecture | None:
        for lecture in self.lectures:
            if str(lecture.id) == str(lecture_id):
                return lecture
        return None


def load_catalog(content_dir: str = PACKAGE_CONTENT_DIR) -> list[Subject]:
    """Read every subject in the order they are listed."""
    data = json.loads((Path(content_dir) / "subjects.json").read_text(encoding="utf-8"))
    subjects = []
    for s in data["subjects"]:
        lectures = tuple(
            Lecture(
                id=int(l["id"]),
                title=l["title"],
                duration_minutes=int(l.get("duration_minutes", 0)),
                question_count=int(l.get("question_count", 10)),
                topics=tuple(l.get("topics", [])),
            )
            for l in s.get("lectures", [])
        )
        subjects.append(Subject(
            id=s["id"], name=s["name"], description=s.get("description", ""), lectures=lectures,
        ))
    logger.debug("Loaded %d subjects from %s", len(subjects), content_dir)
    return subjects


def get_subject(catalog: list[Subject], subject_id: str) -> Subject | None:
    for subject in catalog:
        if subject.id == subject_id:
            return subject
    return None
