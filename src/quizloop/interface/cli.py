"""quizloop CLI: dashboard, selection preview, terminal quiz sessions and the HTTP server."""

import json
import logging
from pathlib import Path
from string import ascii_lowercase
from typing import Annotated, Literal

import typer

from quizloop.application.config import AppConfig, resolve_config
from quizloop.application.logging_setup import setup_logging
from quizloop.domain.errors import QuestionBankError
from quizloop.domain.models import QuestionRecord
from quizloop.domain.modes import MODES, QuizMode, get_mode

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="quizloop: adaptive quiz sessions that keep surfacing what you miss.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage quizloop configuration.")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for quizloop."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose


def _bootstrap(ctx: typer.Context, **overrides) -> AppConfig:
    """Resolve config for this command and start logging."""
    obj = ctx.obj or {}
    config = resolve_config({"verbose": obj.get("verbose_bonus"), **overrides})
    _, log_path, run_id = setup_logging(config)
    logger.debug(f"run={run_id} log={log_path}")
    return config


def _open_service(config: AppConfig):
    from quizloop.application.factory import build_progress_service

    try:
        service = build_progress_service(config)
    except QuestionBankError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from None
    return service.open()


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    bank: Annotated[Path | None, typer.Option(help="Question bank file (YAML or JSON).")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the progress dashboard."""
    config = _bootstrap(ctx, bank_path=bank)
    service = _open_service(config)
    summary = service.summary()
    service.close()

    if json_output:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return

    typer.echo(f"Mastered:       {summary.mastered}")
    typer.echo(f"Studied:        {summary.studied}/{summary.total_questions}")
    color = "yellow" if summary.needs_practice else "green"
    typer.secho(f"Needs practice: {summary.needs_practice}", fg=color)
    typer.echo(f"Accuracy:       {summary.accuracy}%")
    typer.echo(f"Best streak:    {summary.best_streak}")


@app.command()
def modes(
    ctx: typer.Context,
    bank: Annotated[Path | None, typer.Option(help="Question bank file (YAML or JSON).")] = None,
):
    """List quiz modes. Weak Spot Drill is disabled until something needs practice."""
    config = _bootstrap(ctx, bank_path=bank)
    service = _open_service(config)
    weak = service.needs_practice_count()
    service.close()

    for mode in MODES.values():
        line = f"{mode.id:<15} {mode.name:<22} {mode.description}"
        if mode.selection == "weakSpot":
            if weak:
                typer.secho(f"{line} ({weak} to practice)", fg="yellow")
            else:
                typer.secho(f"{line} (disabled: no weak spots yet)", dim=True)
        else:
            typer.echo(line)


@app.command()
def select(
    ctx: typer.Context,
    mode: Annotated[
        Literal["all", "weakSpot"], typer.Option(help="Eligibility filter.")
    ] = "all",
    count: Annotated[int | None, typer.Option(help="How many questions to draw.")] = None,
    bank: Annotated[Path | None, typer.Option(help="Question bank file (YAML or JSON).")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Preview what a session would draw, without recording anything."""
    config = _bootstrap(ctx, bank_path=bank)
    service = _open_service(config)
    picked = service.select(count if count is not None else config.session_size, mode)
    rows = [
        {
            "id": q.id,
            "question": q.question,
            "tier": (
                service.ledger.get_entry(q.id).difficulty.value
                if service.ledger.has_entry(q.id)
                else "unseen"
            ),
        }
        for q in picked
    ]
    service.close()

    if json_output:
        typer.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        typer.secho("Nothing to select.", fg="yellow")
        return
    for i, row in enumerate(rows, 1):
        typer.echo(f"{i:>3}. [{row['tier']:<6}] {row['question']}")


@app.command()
def play(
    ctx: typer.Context,
    mode_id: Annotated[str, typer.Argument(metavar="MODE", help="Mode id, see 'modes'.")] = (
        "multipleChoice"
    ),
    count: Annotated[int | None, typer.Option(help="Questions per session.")] = None,
    bank: Annotated[Path | None, typer.Option(help="Question bank file (YAML or JSON).")] = None,
):
    """[bold green]Play[/bold green] a quiz session in the terminal."""
    from quizloop.application.session import QuizSession

    try:
        mode = get_mode(mode_id)
    except ValueError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(2) from None

    config = _bootstrap(ctx, bank_path=bank)
    service = _open_service(config)
    session = QuizSession(
        service,
        mode,
        size=_session_size(mode, count, config),
        duration=config.speed_duration,
        feedback_delay=config.feedback_delay,
    )

    try:
        if session.is_empty:
            typer.secho("No weak spots yet. Keep practicing in other modes!", fg="green")
            return

        typer.secho(f"{mode.name}: {mode.description}", bold=True)
        session.start()
        play_one = _play_matching if mode.answer_style == "matching" else _play_one
        while not session.is_complete:
            if not play_one(session):
                break
    finally:
        session.close()
        service.close()

    result = session.result()
    typer.echo("")
    typer.secho(
        f"Score: {result.score}/{result.answered} ({result.accuracy}%)",
        fg="green" if result.accuracy >= 70 else "yellow",
    )
    typer.echo(f"Best streak: {service.stats.best_streak}")


def _play_one(session) -> bool:
    """Run one question. Returns False when the player quits."""
    question: QuestionRecord = session.current
    index = session.index
    header = f"\n[{session.index + 1}/{len(session.questions)}]"
    if session.time_left is not None:
        header += f" {session.time_left}s left"
    typer.secho(header, bold=True)
    typer.echo(question.question)

    style = session.mode.answer_style
    if style == "self_grade":
        typer.secho(f"Answer: {question.correct_answer}", fg="cyan")
        outcome = session.self_grade(typer.confirm("Did you know it?", default=True))
    else:
        if style == "choice":
            for i, option in enumerate(session.options, 1):
                typer.echo(f"  {i}. {option}")
        while True:
            raw = typer.prompt("Answer ('h' hint, 'q' quit)").strip()
            if raw.lower() == "q":
                return False
            if raw.lower() == "h":
                typer.secho(f"Hint: {session.reveal_hint() or '(none)'}", fg="cyan")
                continue
            choice = _parse_choice(raw, session.options) if style == "choice" else raw
            if choice is None:
                typer.secho(f"Pick a number from 1 to {len(session.options)}.", fg="red")
                continue
            break
        if session.is_complete:
            typer.secho("Time's up!", fg="yellow")
            return True
        outcome = session.answer(choice)

    if outcome is None:
        return True
    if outcome.was_correct:
        typer.secho(f"Correct! Streak: {outcome.current_streak}", fg="green")
    else:
        typer.secho(f"Incorrect. The answer is: {outcome.correct_answer}", fg="red")
    if outcome.explanation:
        typer.echo(outcome.explanation)
    if not outcome.saved:
        typer.secho("Warning: progress could not be saved.", fg="yellow", err=True)

    # A timed session may already have moved on by itself
    session.advance(expected_index=index)
    return True


def _parse_choice(raw: str, options: list[str]) -> str | None:
    try:
        number = int(raw)
    except ValueError:
        return None
    if 1 <= number <= len(options):
        return options[number - 1]
    return None


def _session_size(mode: QuizMode, count: int | None, config: AppConfig) -> int | None:
    if mode.answer_style != "matching":
        return count if count is not None else config.session_size
    # Answers are labelled a-z; None lets the session use its board size
    return min(count, len(ascii_lowercase)) if count is not None else None


def _play_matching(session) -> bool:
    """Run one pairing on the matching board. Returns False when the player quits."""
    board: list[QuestionRecord] = session.unmatched
    typer.secho(f"\n{len(board)} left to match", bold=True)
    for i, question in enumerate(board, 1):
        typer.echo(f"  {i}. {question.question}")
    for letter, answer in zip(ascii_lowercase, session.options):
        typer.echo(f"  {letter}) {answer}")

    while True:
        raw = typer.prompt("Match, e.g. '1 b' ('q' quit)").strip().lower()
        if raw == "q":
            return False
        pair = _parse_pair(raw, board, session.options)
        if pair is None:
            last = ascii_lowercase[len(session.options) - 1]
            typer.secho(f"Pick a question 1-{len(board)} and an answer a-{last}.", fg="red")
            continue
        break

    question, answer = pair
    outcome = session.match(question.id, answer)
    if outcome is None:
        return True
    if outcome.was_correct:
        typer.secho(f"Matched! Streak: {outcome.current_streak}", fg="green")
    else:
        typer.secho("Not a match.", fg="red")
    if not outcome.saved:
        typer.secho("Warning: progress could not be saved.", fg="yellow", err=True)
    return True


def _parse_pair(
    raw: str, board: list[QuestionRecord], options: list[str]
) -> tuple[QuestionRecord, str] | None:
    parts = raw.split()
    if len(parts) != 2 or len(parts[1]) != 1:
        return None
    try:
        number = int(parts[0])
    except ValueError:
        return None
    position = ascii_lowercase.find(parts[1])
    if not 1 <= number <= len(board) or not 0 <= position < len(options):
        return None
    return board[number - 1], options[position]


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation for destructive actions.")
    ] = False,
    bank: Annotated[Path | None, typer.Option(help="Question bank file (YAML or JSON).")] = None,
):
    """Forget all progress: ledger, streaks and totals."""
    config = _bootstrap(ctx, bank_path=bank)
    if not force:
        typer.confirm(f"Erase all progress in {config.progress_path}?", abort=True)

    service = _open_service(config)
    service.reset()
    service.close()
    typer.secho("Progress reset.", fg="green")


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the quizloop HTTP server."""
    import uvicorn

    uvicorn.run("quizloop.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
