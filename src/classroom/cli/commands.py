"""CLI commands for the classroom engine.

Commands:
- init-db: Create the local database
- enroll: Register a user (student by default)
- create-lesson: Publish a lesson from a YAML file
- list: List lessons in display order
- take: Take a lesson's quiz interactively
- progress: Show a student's completion percentage
- chat: Ask the lesson assistant questions
- serve: Run the Web API
"""

import asyncio
from pathlib import Path
from typing import Any

import typer
import uvicorn
import yaml
from rich.console import Console
from rich.table import Table

from classroom.config.app_config import load_app_config
from classroom.core.dashboard import load_dashboard, load_lesson_page
from classroom.core.enrolment import enroll_user
from classroom.core.models import (
    Lesson,
    LessonDraft,
    LessonValidationError,
    MultipleChoiceQuestion,
    Question,
    QuestionFormatError,
    Role,
    SessionContext,
)
from classroom.core.ordering import publish_lesson
from classroom.core.progress import ProgressTracker
from classroom.core.quiz_session import QuizEventType, QuizSession, QuizState
from classroom.core.repositories import RepositoryError
from classroom.core.tutor_chat import TutorConversation
from classroom.db import (
    SqliteLessonRepository,
    SqliteProgressRepository,
    SqliteUserRepository,
    init_db,
)
from classroom.llm.client import LLMClient

app = typer.Typer(
    name="classroom",
    help="Lessons with embedded quizzes, grading and student progress.",
    no_args_is_help=True,
)

console = Console()


def _open_db() -> Path:
    """Resolve the database path from config and make sure the schema exists."""
    db_path = load_app_config().db_path
    init_db(db_path)
    return db_path


async def _load_context(db_path: Path, user_id: str) -> SessionContext | None:
    role = await SqliteUserRepository(db_path).get_role(user_id)
    if role is None:
        return None
    return SessionContext(user_id=user_id, role=role)


def _require_context(db_path: Path, user_id: str) -> SessionContext:
    try:
        context = asyncio.run(_load_context(db_path, user_id))
    except RepositoryError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    if context is None:
        console.print(f"[red]✗ Unknown user '{user_id}'. Run 'classroom enroll' first.[/red]")
        raise typer.Exit(code=1)
    return context


def _require_lesson(db_path: Path, lesson_id: str) -> Lesson:
    page = asyncio.run(load_lesson_page(SqliteLessonRepository(db_path), lesson_id))
    if page.lesson is None:
        console.print(f"[red]✗ {page.error}[/red]")
        raise typer.Exit(code=1)
    return page.lesson


# =============================================================================
# SETUP
# =============================================================================


@app.command(name="init-db")
def init_database() -> None:
    """Create the local database (safe to run twice)."""
    db_path = _open_db()
    console.print(f"[green]✓ Database ready:[/green] {db_path}")


@app.command()
def enroll(
    user_id: str = typer.Argument(..., help="User identifier"),
    teacher: bool = typer.Option(False, "--teacher", help="Register as teacher"),
) -> None:
    """Register a user on first sign-in. Known users keep their role."""
    db_path = _open_db()
    requested = Role.TEACHER if teacher else Role.STUDENT
    try:
        context = asyncio.run(
            enroll_user(
                SqliteUserRepository(db_path),
                SqliteProgressRepository(db_path),
                user_id,
                requested,
            )
        )
    except RepositoryError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] {context.user_id}: {context.role.value}")


# =============================================================================
# LESSONS
# =============================================================================


@app.command(name="create-lesson")
def create_lesson(
    lesson_file: Path = typer.Argument(..., help="YAML file with title, content and questions"),
    user_id: str = typer.Option(..., "--user", "-u", help="Teacher creating the lesson"),
) -> None:
    """Publish a lesson as the last one in display order.

    Example YAML:

        title: Capitals
        content: Paris is the capital of France.
        questions:
          - type: multiple_choice
            text: Capital of France?
            options: [Lyon, Paris, Nice, Lille]
            correct_answer: 1
    """
    db_path = _open_db()
    context = _require_context(db_path, user_id)
    if not context.is_teacher:
        console.print("[red]✗ Only teachers can create lessons[/red]")
        raise typer.Exit(code=1)

    if not lesson_file.exists():
        console.print(f"[red]✗ File not found: {lesson_file}[/red]")
        raise typer.Exit(code=1)

    try:
        data = yaml.safe_load(lesson_file.read_text(encoding="utf-8")) or {}
        draft = LessonDraft.from_dict(data)
    except (yaml.YAMLError, QuestionFormatError) as e:
        console.print(f"[red]✗ Invalid lesson file: {e}[/red]")
        raise typer.Exit(code=1)

    try:
        lesson_id = asyncio.run(publish_lesson(SqliteLessonRepository(db_path), draft))
    except LessonValidationError as e:
        console.print("[red]✗ Lesson has problems:[/red]")
        for problem in e.problems:
            console.print(f"  - {problem}")
        raise typer.Exit(code=1)
    except RepositoryError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Lesson created:[/green] {lesson_id}")


@app.command(name="list")
def list_lessons(
    user_id: str = typer.Option(..., "--user", "-u", help="Signed-in user"),
) -> None:
    """List lessons in display order (with progress for students)."""
    db_path = _open_db()
    context = _require_context(db_path, user_id)
    dashboard = asyncio.run(
        load_dashboard(
            context,
            SqliteLessonRepository(db_path),
            SqliteProgressRepository(db_path),
        )
    )
    if dashboard.error:
        console.print(f"[red]✗ {dashboard.error}[/red]")
        raise typer.Exit(code=1)

    if dashboard.progress_percent is not None:
        console.print(f"Your progress: {dashboard.progress_percent:.2f}% complete")

    if not dashboard.lessons:
        console.print("[yellow]No lessons yet[/yellow]")
        return

    table = Table(title="Lessons")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Questions", justify="right")
    table.add_column("ID", style="dim")
    for lesson in dashboard.lessons:
        table.add_row(str(lesson.order), lesson.title, str(lesson.total_questions), lesson.id)
    console.print(table)


# =============================================================================
# QUIZ
# =============================================================================


def _ask_mcq(question: MultipleChoiceQuestion) -> int:
    """Ask MCQ question and loop until valid input (1..k)."""
    n_options = len(question.options)

    while True:
        for idx, opt in enumerate(question.options, start=1):
            console.print(f"  {idx}. {opt}")

        raw = typer.prompt(f"Choose an option (1-{n_options})")
        try:
            choice = int(raw.strip())
            if 1 <= choice <= n_options:
                return choice - 1
            console.print(f"[yellow]⚠ Must be 1-{n_options}[/yellow]")
        except ValueError:
            console.print("[yellow]⚠ Enter a number[/yellow]")


def _ask_short_answer() -> str:
    """Ask short answer question and loop until non-empty."""
    while True:
        raw = typer.prompt("Answer").strip()

        if raw:
            return raw
        console.print("[yellow]⚠ The answer cannot be empty[/yellow]")


def _ask_question(num: int, total: int, question: Question) -> Any:
    """Route to appropriate input handler based on question type."""
    console.print(f"\n[blue]Question {num}/{total}[/blue]")
    console.print(f"[bold]{question.text}[/bold]")

    if isinstance(question, MultipleChoiceQuestion):
        return _ask_mcq(question)
    return _ask_short_answer()


async def _run_quiz(session: QuizSession) -> None:
    try:
        while session.state is QuizState.IN_PROGRESS:
            question = session.current_question
            answer = _ask_question(session.current_index + 1, session.total_questions, question)
            session.select_answer(answer)
            event = session.advance()
            if event is not None:
                style = "green" if event.data.get("correct") else "red"
                console.print(f"[{style}]{event.markdown}[/{style}]")
            await session.wait_idle()
    finally:
        session.close()


@app.command()
def take(
    lesson_id: str = typer.Argument(..., help="Lesson ID"),
    user_id: str = typer.Option(..., "--user", "-u", help="Student taking the quiz"),
    feedback_seconds: float | None = typer.Option(
        None, "--feedback-seconds", help="Feedback display time (overrides config)"
    ),
) -> None:
    """Read a lesson and answer its quiz."""
    db_path = _open_db()
    context = _require_context(db_path, user_id)
    lesson = _require_lesson(db_path, lesson_id)

    if feedback_seconds is None:
        feedback_seconds = load_app_config().quiz.feedback_seconds

    console.rule(f"[bold]{lesson.title}[/bold]")
    console.print(lesson.content)

    tracker = ProgressTracker(SqliteProgressRepository(db_path), context)
    session = QuizSession(lesson, context, tracker, feedback_seconds=feedback_seconds)
    asyncio.run(_run_quiz(session))

    completed = [e for e in session.events if e.event_type is QuizEventType.QUIZ_COMPLETED]
    if completed:
        console.print(f"\n[bold]{completed[0].title}[/bold]")
        console.print(completed[0].markdown)
    elif session.total_questions == 0:
        console.print("[yellow]This lesson has no questions[/yellow]")

    if session.error:
        console.print(f"[red]✗ {session.error}[/red]")
        raise typer.Exit(code=1)


@app.command()
def progress(
    user_id: str = typer.Argument(..., help="Student ID"),
) -> None:
    """Show a student's completion percentage."""
    db_path = _open_db()
    context = _require_context(db_path, user_id)
    if not context.is_student:
        console.print("[yellow]Progress is tracked for students only[/yellow]")
        return

    dashboard = asyncio.run(
        load_dashboard(
            context,
            SqliteLessonRepository(db_path),
            SqliteProgressRepository(db_path),
        )
    )
    if dashboard.error:
        console.print(f"[red]✗ {dashboard.error}[/red]")
        raise typer.Exit(code=1)

    console.print(f"{dashboard.progress_percent:.2f}% complete")


# =============================================================================
# CHAT
# =============================================================================


async def _chat_loop(conversation: TutorConversation) -> None:
    while True:
        text = typer.prompt("You", default="", show_default=False)
        if text.strip().lower() in ("", "quit", "exit"):
            break
        reply = await conversation.ask(text)
        console.print(f"[cyan]Tutor:[/cyan] {reply}")


@app.command()
def chat(
    lesson_id: str = typer.Argument(..., help="Lesson ID"),
    model: str | None = typer.Option(None, "-m", "--model", help="Model name (overrides config)"),
) -> None:
    """Ask the lesson assistant questions (empty line to quit)."""
    db_path = _open_db()
    lesson = _require_lesson(db_path, lesson_id)

    client = LLMClient(load_app_config().llm, model=model)
    conversation = TutorConversation(lesson.title, lesson.content, client)
    console.print(f"[bold]Lesson Assistant[/bold] – {lesson.title}")
    asyncio.run(_chat_loop(conversation))


# =============================================================================
# WEB
# =============================================================================


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Port"),
) -> None:
    """Run the Web API."""
    _open_db()
    uvicorn.run("classroom.web.api:app", host=host, port=port)


if __name__ == "__main__":
    app()
