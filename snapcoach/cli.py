"""CLI commands for SnapCoach."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from snapcoach.config import settings
from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.models.daily_log import DailyLog
from snapcoach.services.errors import InputError
from snapcoach.services.history_store import HistoryStore
from snapcoach.services.image_service import compress_image
from snapcoach.services.pipeline import MealSession, PipelineState
from snapcoach.services.providers import get_vision_provider
from snapcoach.services.vision_service import VisionService
from snapcoach.services.weekly_service import DAYS_PER_WEEK, analyze_week


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


async def _run_pipeline(
    session: MealSession, image: bytes, goal: str, notes: str
) -> Optional[str]:
    """Drive one session to RESULT. Returns an error message on failure."""
    await session.submit_image(image)
    if session.state != PipelineState.CONFIRMATION:
        return f"Identification failed: {session.error}"

    question = session.identification.missing_info_question
    if question and not notes:
        print(f"Note: the model asks: {question}", file=sys.stderr)

    session.set_notes(notes)
    session.set_goal(goal)
    await session.confirm()
    if session.state != PipelineState.RESULT:
        return f"Analysis failed: {session.error}"
    return None


def analyze(
    image_path: str,
    goal: str = AnalysisGoal.HEALTH.value,
    notes: str = "",
    log: bool = False,
    provider: Optional[str] = None,
) -> None:
    """Run identify -> analyze on an image file and print the result."""
    try:
        image = compress_image(Path(image_path).read_bytes())
    except (OSError, InputError) as e:
        print(f"Error: Could not load image '{image_path}': {e}")
        sys.exit(1)

    history = HistoryStore()
    session = MealSession(VisionService(get_vision_provider(provider)), history=history)
    error = asyncio.run(_run_pipeline(session, image, goal, notes))
    if error:
        print(f"Error: {error}")
        sys.exit(1)

    output = {
        "identification": session.identification.model_dump(mode="json"),
        "context": session.context,
        "analysis": session.analysis.model_dump(mode="json"),
    }
    if log:
        entry = session.log_meal()
        output["logged_entry_id"] = entry.id
    _print_json(output)


def show_history(clear: bool = False) -> None:
    """List logged meals, or clear them."""
    history = HistoryStore()
    if clear:
        history.clear()
        print("Meal history cleared.")
        return

    entries = history.load()
    if not entries:
        print("No meals logged yet.")
        return
    _print_json([entry.model_dump(mode="json", exclude={"image"}) for entry in entries])


def weekly_report(logs_path: str) -> None:
    """Print the weekly report for a JSON file holding a list of daily logs."""
    try:
        raw = json.loads(Path(logs_path).read_text(encoding="utf-8"))
        logs = TypeAdapter(list[DailyLog]).validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Error: Could not read daily logs from '{logs_path}': {e}")
        sys.exit(1)

    if len(logs) != DAYS_PER_WEEK:
        print(
            f"Warning: {len(logs)} daily logs supplied; averages assume exactly {DAYS_PER_WEEK}.",
            file=sys.stderr,
        )
    _print_json(analyze_week(logs).model_dump(mode="json", by_alias=True))


def main():
    parser = argparse.ArgumentParser(description="SnapCoach CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze", help="Identify and analyze a meal photo"
    )
    analyze_parser.add_argument("image", help="Path to the meal photo")
    analyze_parser.add_argument(
        "--goal",
        choices=[goal.value for goal in AnalysisGoal],
        default=AnalysisGoal.HEALTH.value,
        help="Coaching tone (default: health)",
    )
    analyze_parser.add_argument("--notes", default="", help="Extra context about the meal")
    analyze_parser.add_argument(
        "--log", action="store_true", help="Save the result to meal history"
    )
    analyze_parser.add_argument(
        "--provider", choices=["claude", "mock"], help="Override the configured provider"
    )

    # history command
    history_parser = subparsers.add_parser("history", help="Show logged meals")
    history_parser.add_argument(
        "--clear", action="store_true", help="Delete all logged meals"
    )

    # weekly-report command
    report_parser = subparsers.add_parser(
        "weekly-report", help="Summarize a week of daily logs"
    )
    report_parser.add_argument("file", help="JSON file with a list of daily logs")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "analyze":
        analyze(args.image, args.goal, args.notes, args.log, args.provider)
    elif args.command == "history":
        show_history(args.clear)
    elif args.command == "weekly-report":
        weekly_report(args.file)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
