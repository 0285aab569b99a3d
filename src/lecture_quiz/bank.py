"""Question content: loading, per-subject caching, lecture filtering and variant padding."""
import asyncio
import dataclasses
import json
import logging
import random
from pathlib import Path

import httpx

from lecture_quiz.errors import ContentUnavailable
from lecture_quiz.models import DIFFICULTIES, Question
from lecture_quiz.notifications import Notifier, NullNotifier

logger = logging.getLogger(__name__)

# Variant clones are tagged with a lecture between 1 and this value.
VARIANT_LECTURES = 5


def parse_questions(subject_id: str, text: str) -> list[Question]:
    """Parse a JSON array of question records, skipping malformed entries."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ContentUnavailable(subject_id, f"malformed JSON: {e}") from e
    if not isinstance(data, list):
        raise ContentUnavailable(subject_id, "expected a JSON array of questions")
    questions = []
    for i, record in enumerate(data):
        try:
            questions.append(Question.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping question #%d for %s: %s", i + 1, subject_id, e)
    return questions


class ContentSource:
    async def fetch(self, subject_id: str) -> list[Question]:
        raise NotImplementedError


class DirectoryContentSource(ContentSource):
    """Reads ``<root>/questions/<subject_id>.json``."""

    def __init__(self, root: str):
        self.root = Path(root)

    def path_for(self, subject_id: str) -> Path:
        return self.root / "questions" / f"{subject_id}.json"

    async def fetch(self, subject_id: str) -> list[Question]:
        path = self.path_for(subject_id)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentUnavailable(subject_id, f"cannot read {path}: {e}") from e
        return parse_questions(subject_id, text)


class HttpContentSource(ContentSource):
    """Fetches ``GET <base_url>/questions/<subject_id>.json``."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def url_for(self, subject_id: str) -> str:
        return f"{self.base_url}/questions/{subject_id}.json"

    async def fetch(self, subject_id: str) -> list[Question]:
        url = self.url_for(subject_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ContentUnavailable(subject_id, f"GET {url} failed: {e}") from e
        return parse_questions(subject_id, response.text)


class QuestionBank:
    """Supplies question sets per subject. Successful loads are cached for the session."""

    def __init__(self, source: ContentSource, notifier: Notifier = None):
        self.source = source
        self.notifier = notifier or NullNotifier()
        self._cache: dict[str, list[Question]] = {}
        self._pending: dict[str, asyncio.Task] = {}
        self._errors: dict[str, ContentUnavailable] = {}

    async def _fetch(self, subject_id: str) -> list[Question]:
        try:
            questions = await self.source.fetch(subject_id)
        except ContentUnavailable as e:
            logger.warning("%s", e)
            self._errors[subject_id] = e
            self.notifier.notify(f"Could not load questions for {subject_id}", "error")
            return []
        self._errors.pop(subject_id, None)
        self._cache[subject_id] = questions
        logger.info("Loaded %d questions for %s", len(questions), subject_id)
        return questions

    async def _load(self, subject_id: str) -> list[Question]:
        if subject_id in self._cache:
            return self._cache[subject_id]
        task = self._pending.get(subject_id)
        if task is None:
            task = asyncio.ensure_future(self._fetch(subject_id))
            self._pending[subject_id] = task

            def _forget(done, subject_id=subject_id):
                if self._pending.get(subject_id) is done:
                    del self._pending[subject_id]

            task.add_done_callback(_forget)
        # One caller giving up must not cancel the load for the others
        return await asyncio.shield(task)

    async def questions_for(self, subject_id: str, lecture_id=None) -> list[Question]:
        """All questions of a subject, or only those tagged with ``lecture_id``."""
        questions = await self._load(subject_id)
        if lecture_id is None:
            return list(questions)
        wanted = str(lecture_id)
        return [q for q in questions if q.lecture_id == wanted]

    async def generate_for(self, subject_id: str, target_count: int = 50, rng: random.Random = None) -> list[Question]:
        base = await self.questions_for(subject_id)
        return generate_question_set(base, target_count, rng or random.Random())

    def last_error(self, subject_id: str) -> ContentUnavailable | None:
        return self._errors.get(subject_id)

    def invalidate(self, subject_id: str = None) -> None:
        if subject_id is None:
            self._cache.clear()
        else:
            self._cache.pop(subject_id, None)


def generate_question_set(base_questions: list[Question], target_count: int, rng: random.Random) -> list[Question]:
    """Pad ``base_questions`` with relabelled clones up to ``target_count``, then shuffle.

    Clones keep their options and correct answer; only the lecture tag, the
    prompt suffix and the difficulty change.
    """
    base = list(base_questions)
    if not base or target_count <= 0:
        return []
    questions = list(base)
    while len(questions) < target_count:
        source = base[len(questions) % len(base)]
        variant = len(questions) // len(base) + 1
        questions.append(dataclasses.replace(
            source,
            lecture_id=str(rng.randint(1, VARIANT_LECTURES)),
            prompt=f"{source.prompt} (Variant {variant})",
            difficulty=rng.choice(DIFFICULTIES),
        ))
    questions = questions[:target_count]
    rng.shuffle(questions)
    return questions
