import asyncio
from unittest.mock import patch

import pytest

from lecture_quiz.app import (
    after_results, apply_theme, build_controller, cmd_analytics, cmd_lectures, cmd_resume,
    cmd_theme, option_letter, run_quiz, stars,
)
from lecture_quiz.config import Settings
from lecture_quiz.session import SessionStatus


@pytest.fixture
def controller(tmp_db, notifier, clock):
    c = build_controller(Settings(db_path=tmp_db))
    c.notifier = notifier
    c.bank.notifier = notifier
    c.clock = clock
    c.ticker = None
    return c


def _open(controller):
    return asyncio.run(controller.open_lecture("crypto", 1))


def test_option_letter():
    assert option_letter(0) == "a"
    assert option_letter(3) == "d"


def test_stars():
    assert stars(3) == "★★★☆☆"
    assert stars(0) == "☆☆☆☆☆"


def test_build_controller_uses_directory_content(tmp_db):
    from lecture_quiz.bank import DirectoryContentSource

    c = build_controller(Settings(db_path=tmp_db))
    assert isinstance(c.bank.source, DirectoryContentSource)
    assert [s.id for s in c.catalog] == ["ethicalhacking", "crypto", "networks"]
    assert c.ticker is not None


def test_build_controller_uses_http_content(tmp_db):
    from lecture_quiz.bank import HttpContentSource

    c = build_controller(Settings(db_path=tmp_db, content_url="https://quiz.example"))
    assert isinstance(c.bank.source, HttpContentSource)


def test_run_quiz_answers_and_submits(controller):
    session = _open(controller)
    assert len(session.questions) == 3
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["a", "b", "c", "s"]):
        run_quiz(controller)
    assert session.status is SessionStatus.SUBMITTED
    assert session.unanswered_count() == 0
    assert controller.store.profile.total_quizzes == 1


def test_run_quiz_confirms_unanswered(controller):
    session = _open(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["a", "s", "x"]), \
            patch("lecture_quiz.app.Confirm.ask", return_value=False) as confirm:
        run_quiz(controller)
    confirm.assert_called_once()
    assert session.status is SessionStatus.IN_PROGRESS
    assert controller.session is None


def test_run_quiz_submit_anyway(controller):
    session = _open(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["s"]), \
            patch("lecture_quiz.app.Confirm.ask", return_value=True):
        run_quiz(controller)
    assert session.status is SessionStatus.SUBMITTED
    assert session.result.correct_count == 0


def test_run_quiz_navigation_commands(controller):
    session = _open(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["g 3", "*", "p", "9", "g x", "?", "m", "zz", "x"]):
        run_quiz(controller)
    assert session.current_index == 1
    assert session.bookmarked == {2}


def test_save_and_leave_then_resume(controller):
    _open(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["b", "x"]):
        run_quiz(controller)
    assert controller.session is None

    with patch("lecture_quiz.app.Prompt.ask", side_effect=["s", "home"]), \
            patch("lecture_quiz.app.Confirm.ask", return_value=True):
        cmd_resume(controller)
    assert controller.session is None
    assert controller.store.profile.total_quizzes == 1
    assert controller.resume() is None


def test_resume_with_nothing_saved(controller):
    with patch("lecture_quiz.app.Prompt.ask") as ask:
        cmd_resume(controller)
    ask.assert_not_called()


def test_retry_after_results(controller):
    session = _open(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["a", "a", "a", "s"]):
        run_quiz(controller)
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["retry", "a", "a", "a", "s", "home"]):
        after_results(controller)
    assert controller.store.profile.total_quizzes == 2
    assert session.status is SessionStatus.SUBMITTED
    assert controller.session is None


def test_cmd_lectures_back(controller):
    with patch("lecture_quiz.app.Prompt.ask", return_value="back"):
        cmd_lectures(controller, "crypto")
    assert controller.session is None


def test_cmd_lectures_pdf_without_file(controller, notifier):
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["pdf", ""]):
        cmd_lectures(controller, "crypto")
    assert controller.session is None
    assert ("Please select a PDF file first", "error") in notifier.messages


def test_cmd_lectures_all(controller):
    controller.generated_count = 5
    answers = ["a"] * 5 + ["s", "home"]
    with patch("lecture_quiz.app.Prompt.ask", side_effect=["all"] + answers):
        cmd_lectures(controller, "networks")
    history = controller.store.profile.quiz_history
    assert history[-1].lecture_id == "all"
    assert history[-1].total_count == 5


def test_cmd_analytics_runs(controller):
    controller.store.record_quiz_result("crypto", 1, 2, 3, 30)
    cmd_analytics(controller)


def test_cmd_theme_switches(controller, notifier):
    apply_theme("light")
    cmd_theme(controller)
    assert controller.store.profile.theme == "dark"
    assert ("Switched to dark mode", "success") in notifier.messages


def test_console_styles_resolve_without_main():
    from lecture_quiz.app import console

    for style in ("accent", "muted", "option"):
        console.get_style(style)
