"""Wires question loading, the running quiz session and progress persistence together."""
import logging
import random
from datetime import datetime
from typing import Callable, Optional

from lecture_quiz.bank import QuestionBank
from lecture_quiz.catalog import ALL_LECTURES, Subject, get_subject
from lecture_quiz.errors import EmptyQuestionSet
from lecture_quiz.importer import read_pdf
from lecture_quiz.models import Question, QuizAttemptResult
from lecture_quiz.notifications import Notifier, NullNotifier
from lecture_quiz.progress import ProgressStore
from lecture_quiz.session import QuizSession, SessionSnapshotStore
from lecture_quiz.ticker import ElapsedTicker

logger = logging.getLogger(__name__)


class QuizController:
    """Owns the current quiz. Mutations are synchronous and persist before returning."""

    def __init__(
        self,
        store: ProgressStore,
        bank: QuestionBank,
        snapshots: SessionSnapshotStore,
        catalog: list[Subject],
        notifier: Notifier = None,
        ticker: ElapsedTicker = None,
        rng: random.Random = None,
        clock: Callable[[], datetime] = datetime.now,
        generated_count: int = 50,
    ):
        self.store = store
        self.bank = bank
        self.snapshots = snapshots
        self.catalog = catalog
        self.notifier = notifier or NullNotifier()
        self.ticker = ticker
        self.rng = rng or random.Random()
        self.clock = clock
        self.generated_count = generated_count
        self.session: Optional[QuizSession] = None
        self.context: Optional[tuple] = None

    def _subject(self, subject_id: str) -> Subject | None:
        subject = get_subject(self.catalog, subject_id)
        if subject is None:
            self.notifier.notify(f"Unknown subject: {subject_id}", "error")
        return subject

    def _is_current(self, requested: tuple) -> bool:
        if self.context != requested:
            logger.info("Discarding questions for %s, context moved to %s", requested, self.context)
            return False
        return True

    def _begin(self, subject_id: str, lecture_id, questions: list[Question]) -> QuizSession | None:
        session = QuizSession(subject_id, lecture_id, clock=self.clock)
        try:
            session.start(questions)
        except EmptyQuestionSet as e:
            logger.warning("%s", e)
            if self.bank.last_error(subject_id) is None:
                self.notifier.notify("No questions available for this selection", "error")
            return None
        self.session = session
        self.snapshots.save(session)
        self._start_ticker()
        self.notifier.notify("Quiz started! Good luck", "info")
        return session

    def _start_ticker(self) -> None:
        if self.ticker is not None:
            self.ticker.start()

    def _stop_ticker(self) -> None:
        if self.ticker is not None:
            self.ticker.stop()

    async def open_lecture(self, subject_id: str, lecture_id) -> QuizSession | None:
        subject = self._subject(subject_id)
        if subject is None:
            return None
        lecture = subject.get_lecture(lecture_id)
        if lecture is None:
            self.notifier.notify(f"Unknown lecture: {lecture_id}", "error")
            return None
        requested = (subject_id, str(lecture_id))
        self.context = requested
        questions = await self.bank.questions_for(subject_id, lecture_id)
        if not self._is_current(requested):
            return None
        self.rng.shuffle(questions)
        return self._begin(subject_id, lecture_id, questions[:lecture.question_count])

    async def open_all_lectures(self, subject_id: str) -> QuizSession | None:
        if self._subject(subject_id) is None:
            return None
        requested = (subject_id, ALL_LECTURES)
        self.context = requested
        questions = await self.bank.generate_for(subject_id, self.generated_count, self.rng)
        if not self._is_current(requested):
            return None
        return self._begin(subject_id, ALL_LECTURES, questions)

    async def generate_from_pdf(self, subject_id: str, file_path: str) -> QuizSession | None:
        """Simulated generation: the PDF is only validated, questions come from the bank."""
        if not file_path:
            self.notifier.notify("Please select a PDF file first", "error")
            return None
        try:
            info = read_pdf(file_path)
        except ValueError as e:
            self.notifier.notify(str(e), "error")
            return None
        logger.info("Generating quiz for %s from %s (%d pages)", subject_id, info["filename"], info["pages"])
        session = await self.open_all_lectures(subject_id)
        if session is not None:
            self.notifier.notify(f"Generated {len(session.questions)} questions", "success")
        return session

    def answer(self, option_index: int) -> None:
        self.session.record_answer(option_index)
        self.snapshots.save(self.session)

    def go_to(self, index: int) -> None:
        self.session.go_to(index)
        self.snapshots.save(self.session)

    def next(self) -> bool:
        moved = self.session.next()
        self.snapshots.save(self.session)
        return moved

    def previous(self) -> bool:
        moved = self.session.previous()
        self.snapshots.save(self.session)
        return moved

    def toggle_bookmark(self, index: int = None) -> bool:
        index = self.session.current_index if index is None else index
        marked = self.session.toggle_bookmark(index)
        self.snapshots.save(self.session)
        if marked:
            self.notifier.notify("Question saved for review", "info")
        return marked

    def submit(self) -> QuizAttemptResult:
        """Score the session and record it in the user's progress."""
        result = self.session.submit()
        self._stop_ticker()
        self.snapshots.clear()
        return self.store.record_attempt(result)

    def retry(self) -> QuizSession:
        self.session.restart(self.rng)
        self.snapshots.save(self.session)
        self._start_ticker()
        return self.session

    def resume(self) -> QuizSession | None:
        session = self.snapshots.load(now=self.clock(), clock=self.clock)
        if session is None:
            return None
        self.session = session
        self.context = (session.subject_id, session.lecture_id)
        self._start_ticker()
        self.notifier.notify("Quiz session restored", "info")
        return session

    def toggle_pause(self) -> bool:
        """Pause or resume the elapsed-time display. Returns whether it is running."""
        if self.ticker is None:
            return False
        running = self.ticker.toggle()
        self.notifier.notify("Quiz resumed" if running else "Quiz paused", "info")
        return running

    def suspend(self) -> None:
        """Leave the quiz but keep its snapshot for a later resume."""
        self._stop_ticker()
        self.session = None
        self.context = None

    def go_home(self) -> None:
        """Abandon the current quiz."""
        self._stop_ticker()
        self.session = None
        self.context = None
        self.snapshots.clear()
