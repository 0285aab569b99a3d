"""Interactive CLI application."""
import asyncio
import random
from datetime import timedelta

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.theme import Theme

from lecture_quiz.bank import DirectoryContentSource, HttpContentSource, QuestionBank
from lecture_quiz.catalog import ALL_LECTURES, get_subject, load_catalog
from lecture_quiz.config import Settings
from lecture_quiz.controller import QuizController
from lecture_quiz.dashboard import (
    analytics, get_score_color, lecture_cards, subject_overview, subject_performance,
)
from lecture_quiz.db import init_db
from lecture_quiz.errors import InvalidNavigationIndex
from lecture_quiz.logging_config import init_logging
from lecture_quiz.notifications import ConsoleNotifier
from lecture_quiz.progress import ProgressStore
from lecture_quiz.session import SessionSnapshotStore, SessionStatus
from lecture_quiz.ticker import ElapsedTicker, format_elapsed

THEMES = {
    "light": Theme({"accent": "blue", "muted": "dim", "option": "cyan"}),
    "dark": Theme({"accent": "bright_magenta", "muted": "grey50", "option": "bright_cyan"}),
}

DIFFICULTY_LABELS = {"easy": "Easy", "medium": "Medium", "hard": "Hard"}

console = Console(theme=THEMES["light"])


def apply_theme(theme: str) -> None:
    console.push_theme(THEMES.get(theme, THEMES["light"]))


def option_letter(index: int) -> str:
    return chr(ord("a") + index)


def stars(count: int) -> str:
    return "★" * count + "☆" * (5 - count)


def show_welcome():
    console.print(Panel(
        "[bold]Lecture Quiz[/bold]\n[muted]Practice subject by subject, lecture by lecture[/muted]",
        title="Welcome", border_style="accent",
    ))


def show_menu(can_resume: bool = False):
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("subjects", "Pick a subject and lecture"),
        ("analytics", "Progress, streak and achievements"),
        ("theme", "Switch light/dark theme"),
        ("quit", "Exit"),
    ]
    if can_resume:
        commands.insert(0, ("resume", "Continue your unfinished quiz"))
    for cmd, desc in commands:
        console.print(f"  [option]{cmd:<14}[/option] {desc}")


def show_question(session) -> None:
    q = session.current_question
    index = session.current_index
    total = len(session.questions)
    marker = " [yellow]🔖[/yellow]" if index in session.bookmarked else ""
    console.print(
        f"\n[bold]Question {index + 1} of {total}[/bold]{marker}  "
        f"[muted]Lecture {q.lecture_id} · {q.category} · {DIFFICULTY_LABELS.get(q.difficulty, q.difficulty)} · "
        f"{format_elapsed(session.elapsed_seconds())}[/muted]"
    )
    console.print(f"{q.prompt}\n")
    chosen = session.answers[index]
    for i, option in enumerate(q.options):
        pointer = "[bold]>[/bold]" if chosen == i else " "
        console.print(f" {pointer} [option]{option_letter(i)})[/option] {option}")


def show_navigator(session) -> None:
    cells = []
    for i in range(len(session.questions)):
        label = str(i + 1)
        if i == session.current_index:
            cells.append(f"[reverse]{label}[/reverse]")
        elif session.is_answered(i):
            cells.append(f"[green]{label}[/green]")
        else:
            cells.append(f"[muted]{label}[/muted]")
    console.print(" ".join(cells))


def show_results(result, session) -> None:
    color = get_score_color(result.percentage)
    console.print(Panel(
        f"[{color}][bold]{result.percentage}%[/bold][/{color}]\n"
        f"Correct: [green]{result.correct_count}[/green]  "
        f"Incorrect: [red]{result.total_count - result.correct_count}[/red]  "
        f"Time: {format_elapsed(result.elapsed_seconds)}",
        title="Results", border_style=color,
    ))
    table = Table(title="Review")
    table.add_column("#", justify="right")
    table.add_column("Question")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    for item in session.review():
        if item.answered:
            style = "green" if item.is_correct else "red"
            yours = f"[{style}]{option_letter(item.chosen_index)}) {item.chosen_option}[/{style}]"
        else:
            yours = "[muted]Not answered[/muted]"
        correct = item.question.correct_option_index
        table.add_row(
            str(item.number),
            item.question.prompt,
            yours,
            f"{option_letter(correct)}) {item.question.correct_option}",
        )
    console.print(table)


def run_quiz(controller: QuizController) -> None:
    """Drive the current session until it is submitted or the user leaves."""
    session = controller.session
    while session.status is SessionStatus.IN_PROGRESS:
        show_question(session)
        letters = [option_letter(i) for i in range(len(session.current_question.options))]
        choice = Prompt.ask(
            f"\n[muted]{'/'.join(letters)} answer · n next · p prev · g N go to · * bookmark · "
            f"? hint · m map · t pause · s submit · x save & leave[/muted]"
        ).strip().lower()

        if choice in letters:
            controller.answer(letters.index(choice))
            q = session.current_question
            if session.answers[session.current_index] == q.correct_option_index:
                console.print("[green]Correct![/green]")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{option_letter(q.correct_option_index)}) {q.correct_option}[/green]")
            if not controller.next():
                console.print("[accent]You reached the last question. Type 's' to submit.[/accent]")
        elif choice == "n":
            controller.next()
        elif choice == "p":
            controller.previous()
        elif choice.startswith("g") or choice.isdigit():
            target = choice[1:].strip() if choice.startswith("g") else choice
            if not target.isdigit():
                console.print("[red]Give a question number, e.g. 'g 5'.[/red]")
                continue
            try:
                controller.go_to(int(target) - 1)
            except InvalidNavigationIndex:
                console.print(f"[red]There is no question {target}.[/red]")
        elif choice == "*":
            controller.toggle_bookmark()
        elif choice == "?":
            hint = session.current_question.hint or "No hint for this question."
            console.print(f"[yellow]💡 {hint}[/yellow]")
        elif choice == "m":
            show_navigator(session)
        elif choice == "t":
            controller.toggle_pause()
        elif choice == "s":
            unanswered = session.unanswered_count()
            if unanswered and not Confirm.ask(
                f"You have {unanswered} unanswered question(s). Submit anyway?", default=False,
            ):
                continue
            result = controller.submit()
            show_results(result, session)
        elif choice == "x":
            controller.suspend()
            console.print("[muted]Quiz saved. Use 'resume' from the menu to continue.[/muted]")
            return
        else:
            console.print("[red]Unknown command. Try again.[/red]")


def after_results(controller: QuizController) -> None:
    while True:
        choice = Prompt.ask("Next", choices=["retry", "home"], default="home")
        if choice != "retry":
            controller.go_home()
            return
        controller.retry()
        run_quiz(controller)
        if controller.session is None or controller.session.status is not SessionStatus.SUBMITTED:
            return


def play(controller: QuizController, session) -> None:
    if session is None:
        return
    run_quiz(controller)
    if controller.session is not None and controller.session.status is SessionStatus.SUBMITTED:
        after_results(controller)


def cmd_subjects(controller: QuizController):
    table = Table(title="Subjects")
    table.add_column("ID", style="option")
    table.add_column("Subject")
    table.add_column("Lectures", justify="right")
    for subject in controller.catalog:
        table.add_row(subject.id, subject.name, str(len(subject.lectures)))
    console.print(table)
    subject_id = Prompt.ask("Select subject", choices=[s.id for s in controller.catalog])
    cmd_lectures(controller, subject_id)


def cmd_lectures(controller: QuizController, subject_id: str):
    subject = get_subject(controller.catalog, subject_id)
    profile = controller.store.profile
    overview = subject_overview(profile, subject)
    console.print(Panel(
        f"{subject.description}\n\n"
        f"Lectures: [bold]{overview['total_lectures']}[/bold]  |  "
        f"Completed: [bold]{overview['completed_lectures']}[/bold]  |  "
        f"Average: [bold]{overview['average_score']}%[/bold]",
        title=subject.name, border_style="accent",
    ))
    table = Table()
    table.add_column("#", justify="right", style="option")
    table.add_column("Lecture")
    table.add_column("Duration", justify="right")
    table.add_column("Questions", justify="right")
    table.add_column("Rating")
    table.add_column("Last", justify="right")
    for card in lecture_cards(profile, subject):
        last = f"{card['latest_percentage']}%" if card["completed"] else "-"
        table.add_row(
            str(card["lecture_id"]),
            card["title"] + (f"\n[muted]{', '.join(card['topics'])}[/muted]" if card["topics"] else ""),
            f"{card['duration_minutes']} min",
            str(card["question_count"]),
            f"[yellow]{stars(card['stars'])}[/yellow]",
            last,
        )
    console.print(table)

    choices = [str(l.id) for l in subject.lectures] + [ALL_LECTURES, "pdf", "back"]
    choice = Prompt.ask("Lecture number, 'all', 'pdf' or 'back'", choices=choices, default="back")
    if choice == "back":
        return
    with console.status("Loading questions..."):
        if choice == ALL_LECTURES:
            session = asyncio.run(controller.open_all_lectures(subject_id))
        elif choice == "pdf":
            file_path = Prompt.ask("PDF file path", default="").strip()
            session = asyncio.run(controller.generate_from_pdf(subject_id, file_path))
        else:
            session = asyncio.run(controller.open_lecture(subject_id, choice))
    play(controller, session)


def cmd_resume(controller: QuizController):
    session = controller.resume()
    if session is None:
        console.print("[yellow]Nothing to resume.[/yellow]")
        return
    play(controller, session)


def cmd_analytics(controller: QuizController):
    profile = controller.store.profile
    data = analytics(profile)
    console.print(Panel(
        f"Quizzes: [bold]{data['total_quizzes']}[/bold]  |  "
        f"Correct answers: [bold]{data['total_correct']}[/bold]  |  "
        f"Accuracy: [bold]{data['accuracy']}%[/bold]  |  "
        f"Streak: [bold]{data['study_streak']}[/bold] day(s)",
        title="Analytics", border_style="accent",
    ))

    badges = Table(title="Achievements")
    badges.add_column("")
    badges.add_column("Achievement")
    badges.add_column("Status")
    for badge in data["achievements"]:
        status = "[green]Unlocked[/green]" if badge["unlocked"] else "[muted]Locked[/muted]"
        badges.add_row(badge["icon"], f"{badge['name']}\n[muted]{badge['description']}[/muted]", status)
    console.print(badges)

    table = Table(title="Subject Performance")
    table.add_column("Subject", style="option")
    table.add_column("Quizzes", justify="right")
    table.add_column("Best", justify="right")
    table.add_column("Average", justify="right")
    for row in subject_performance(profile, controller.catalog):
        if not row["started"]:
            table.add_row(row["name"], "-", "-", "[muted]Not started yet[/muted]")
            continue
        color = get_score_color(row["average"])
        table.add_row(
            row["name"], str(row["total_quizzes"]), f"{row['best_percentage']}%",
            f"[{color}]{row['average']}%[/{color}]",
        )
    console.print(table)


def cmd_theme(controller: QuizController):
    theme = controller.store.toggle_theme()
    console.pop_theme()
    apply_theme(theme)
    controller.notifier.notify(f"Switched to {theme} mode", "success")


def build_controller(settings: Settings) -> QuizController:
    notifier = ConsoleNotifier(console)
    store = ProgressStore(settings.db_path, notifier)
    store.load()
    if settings.content_url:
        source = HttpContentSource(settings.content_url, timeout=settings.http_timeout)
    else:
        source = DirectoryContentSource(settings.content_dir)
    controller = QuizController(
        store=store,
        bank=QuestionBank(source, notifier),
        snapshots=SessionSnapshotStore(settings.db_path, timedelta(hours=settings.resume_hours)),
        catalog=load_catalog(settings.content_dir),
        notifier=notifier,
        rng=random.Random(),
        generated_count=settings.generated_count,
    )

    def refresh_title():
        session = controller.session
        if session is not None and session.status is SessionStatus.IN_PROGRESS:
            console.set_window_title(f"Lecture Quiz {format_elapsed(session.elapsed_seconds())}")

    controller.ticker = ElapsedTicker(refresh_title)
    return controller


def main():
    settings = Settings.from_env()
    init_logging(settings.log_level, settings.log_format)
    init_db(settings.db_path)
    controller = build_controller(settings)
    apply_theme(controller.store.get("theme"))

    show_welcome()

    while True:
        can_resume = controller.snapshots.load() is not None
        show_menu(can_resume)
        choice = Prompt.ask("\n[bold]>[/bold]", default="resume" if can_resume else "subjects").strip().lower()
        try:
            if choice == "resume":
                cmd_resume(controller)
            elif choice == "subjects":
                cmd_subjects(controller)
            elif choice == "analytics":
                cmd_analytics(controller)
            elif choice == "theme":
                cmd_theme(controller)
            elif choice in ("quit", "exit", "q"):
                controller.suspend()
                console.print("[muted]See you next time![/muted]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            controller.suspend()
            console.print("\n[muted]Use 'quit' to exit.[/muted]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
