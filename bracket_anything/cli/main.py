from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import typer
import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from ..core.context import build_context
from ..core.errors import BracketError
from ..core.logging_utils import configure_logging
from ..core.orchestrator import search_events, validate_event, validate_with_ai
from ..core.runtime_data import get_runtime_paths
from ..core.scorer import build_leaderboard, complete_quiz
from ..core.sqlite_store import connect, fetch_quiz, fetch_submissions, upsert_quiz
from ..core.types import Quiz

app = typer.Typer()


def _load_quiz(path: Path) -> Quiz:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if "id" not in data:
        data["id"] = path.stem
    try:
        quiz = Quiz.from_dict(data)
    except (KeyError, ValueError) as e:
        typer.echo(f"❌ Invalid quiz {path}: {e}", err=True)
        raise typer.Exit(1)
    if not quiz.created_at:
        quiz.created_at = datetime.now(timezone.utc).isoformat()
    return quiz


def _setup() -> None:
    configure_logging(get_runtime_paths().log_path)


@app.command("events:search")
def events_search(query: str, category: str = "sports") -> None:
    """Search TheSportsDB (sports) or Wikipedia (awards, tv) for events."""
    _setup()

    async def _run():
        ctx = build_context()
        try:
            return await search_events(ctx, query, category)
        finally:
            await ctx.aclose()

    try:
        results = asyncio.run(_run())
    except (BracketError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    if not results:
        typer.echo("No events found.")
        return
    for result in results:
        date = f" ({result.date})" if result.date else ""
        typer.echo(f"{result.id}\t{result.title}{date}")


@app.command("quiz:validate")
def quiz_validate(
    quiz: Path,
    source: str = "ai",
    event_id: str = None,
    page_title: str = None,
    output: Path = None,
) -> None:
    """Suggest correct answers for a quiz YAML file.

    Args:
        quiz: Path to the quiz YAML file
        source: "ai", "thesportsdb" or "wikipedia"
        event_id: TheSportsDB event id or Wikipedia page title
        page_title: Wikipedia page title, overrides event_id
        output: Optional path for the suggested answers as YAML
    """
    _setup()
    quiz_def = _load_quiz(quiz)
    if source != "ai" and not (event_id or page_title):
        typer.echo("❌ --event-id is required for thesportsdb and wikipedia", err=True)
        raise typer.Exit(1)

    async def _run():
        ctx = build_context()
        try:
            if source == "ai":
                return await validate_with_ai(ctx, quiz_def.title, quiz_def.questions)
            metadata = {"pageTitle": page_title} if page_title else {}
            return await validate_event(
                ctx, event_id or page_title, quiz_def.questions, source, metadata
            )
        finally:
            await ctx.aclose()

    try:
        result = asyncio.run(_run())
    except (BracketError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"📋 {result.event_title} via {result.source}")
    for match in result.matches:
        answer = match.suggested_answer or "-"
        typer.echo(f"  {match.question_id}: {answer}  [{match.confidence:.2f}] {match.source}")
    typer.echo(f"Overall confidence: {result.overall_confidence:.2f}")
    if result.unmatched_questions:
        typer.echo(f"⚠️  Unmatched: {', '.join(result.unmatched_questions)}")

    if output:
        answers = {m.question_id: m.suggested_answer for m in result.matches}
        output.write_text(yaml.safe_dump({"answers": answers}, allow_unicode=True), encoding="utf-8")
        typer.echo(f"Suggested answers written to {output}")


@app.command("quiz:import")
def quiz_import(quiz: Path) -> None:
    """Store a quiz YAML file so participants can submit answers."""
    quiz_def = _load_quiz(quiz)
    conn = connect(get_runtime_paths().db_path)
    upsert_quiz(conn, quiz_def)
    conn.close()
    typer.echo(f"Quiz {quiz_def.id} stored with {len(quiz_def.questions)} question(s)")


@app.command("quiz:complete")
def quiz_complete(quiz_id: str, answers: Path) -> None:
    """Complete a stored quiz with the answers in a YAML file and score every submission."""
    _setup()
    data = yaml.safe_load(answers.read_text(encoding="utf-8")) or {}
    correct_answers = data.get("answers", data) if isinstance(data, dict) else data
    conn = connect(get_runtime_paths().db_path)
    try:
        report = complete_quiz(conn, quiz_id, correct_answers)
    except BracketError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()
    typer.echo(f"✅ Scored {len(report.scores)} submission(s)")
    for submission_id, error in report.failures.items():
        typer.echo(f"⚠️  {submission_id}: {error}", err=True)


@app.command("quiz:leaderboard")
def quiz_leaderboard(quiz_id: str, as_json: bool = False) -> None:
    """Print the leaderboard of a stored quiz."""
    conn = connect(get_runtime_paths().db_path)
    quiz = fetch_quiz(conn, quiz_id)
    if quiz is None:
        conn.close()
        typer.echo(f"❌ Quiz {quiz_id} not found", err=True)
        raise typer.Exit(1)
    entries = build_leaderboard(quiz, fetch_submissions(conn, quiz_id))
    conn.close()
    if as_json:
        typer.echo(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return
    for entry in entries:
        score = "-" if entry.score is None else entry.score
        typer.echo(f"{entry.rank:>3}. {entry.user_name}  {score}/{entry.total_points}")


if __name__ == "__main__":
    app()
