"""Command-line interface for ES Writer.

Usage:
    eswriter serve --port 8080
    eswriter answer form.html --subject user-123
    eswriter answer form.html --bio "..." --experience "..." --projects "..." --format json
    eswriter profile set user-123 --bio "..." --experience "..." --projects "..."
    eswriter profile show user-123
"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from eswriter import __version__
from eswriter.clients import create_completion_client
from eswriter.config import Settings, StoreSettings, get_settings
from eswriter.extraction import extract_questions
from eswriter.models import Answer, Deadline, UserProfile
from eswriter.pipeline import AnswerOrchestrator
from eswriter.profiles import ProfileStoreError, SQLiteProfileStore

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=1)

EXIT_NO_QUESTIONS = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="eswriter",
        description="ES Writer — answers application form questions from your profile",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  eswriter serve
  eswriter answer form.html --subject user-123
  eswriter profile set user-123 --bio "CS student" --experience "..." --projects "..."
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", type=str, default=None, help="Bind address (default: from settings)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: from settings)")

    # answer command
    answer_parser = subparsers.add_parser(
        "answer",
        help="Answer the questions of a saved HTML form",
        description="Extract questions from an HTML file and answer them",
    )
    answer_parser.add_argument("html_file", type=Path, help="Saved form markup")
    answer_parser.add_argument(
        "--subject",
        type=str,
        default=None,
        help="Load the profile of this subject from the profile store",
    )
    answer_parser.add_argument("--bio", type=str, default="", help="Profile bio")
    answer_parser.add_argument("--experience", type=str, default="", help="Profile experience")
    answer_parser.add_argument("--projects", type=str, default="", help="Profile projects")
    answer_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # profile command
    profile_parser = subparsers.add_parser("profile", help="Manage stored profiles")
    profile_parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Profile database (default: PROFILE_DB_PATH, else ./data/profiles.db)",
    )
    profile_sub = profile_parser.add_subparsers(dest="profile_command", required=True)
    set_parser = profile_sub.add_parser("set", help="Create or replace a profile")
    set_parser.add_argument("subject", type=str)
    set_parser.add_argument("--bio", type=str, default="")
    set_parser.add_argument("--experience", type=str, default="")
    set_parser.add_argument("--projects", type=str, default="")
    show_parser = profile_sub.add_parser("show", help="Print a stored profile")
    show_parser.add_argument("subject", type=str)

    # version command
    subparsers.add_parser("version", help="Show version information")

    return parser


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context.

    Spins up a new event loop in a dedicated thread to avoid conflicts
    with any existing event loop.
    """
    def _target():
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    future = _executor.submit(_target)
    return future.result()


async def answer_html(html: str, profile: UserProfile, settings: Settings) -> list[Answer]:
    """Run the answering pipeline once, outside the HTTP server."""
    questions = extract_questions(html)
    if not questions:
        return []
    async with create_completion_client(settings) as client:
        orchestrator = AnswerOrchestrator(
            client,
            max_concurrency=settings.max_concurrency,
            cancel_grace=settings.cancel_grace,
            language=settings.prompt_language,
        )
        return await orchestrator.answer(
            questions, profile, Deadline.after(settings.request_deadline)
        )


def cmd_serve(args: argparse.Namespace) -> int:
    """Execute the serve command."""
    import uvicorn

    from eswriter.api import create_app

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    uvicorn.run(
        create_app(settings=settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_answer(args: argparse.Namespace) -> int:
    """Execute the answer command.

    Returns:
        Exit code (0 success, 2 no questions found, 1 failure)
    """
    try:
        html = args.html_file.read_text(encoding="utf-8")
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level)

        if args.subject:
            profile = SQLiteProfileStore(settings.profile_db_path).get(args.subject)
        else:
            profile = UserProfile(bio=args.bio, experience=args.experience, projects=args.projects)

        answers = _run_async(answer_html(html, profile, settings))
        if not answers:
            print("No questions found", file=sys.stderr)
            return EXIT_NO_QUESTIONS

        if args.format == "json":
            print(json.dumps([a.to_dict() for a in answers], ensure_ascii=False, indent=2))
        else:
            for a in answers:
                print(f"Q{a.index + 1}. {a.question}")
                print(a.answer or f"<no answer: {a.status.value}>")
                print()
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except ProfileStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error("Answering failed: %s", e, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_profile(args: argparse.Namespace) -> int:
    """Execute the profile set/show commands.

    The database defaults to ``PROFILE_DB_PATH`` (the same file the server
    reads), so no provider key is needed to manage profiles.
    """
    db_path = args.db or StoreSettings().profile_db_path
    try:
        store = SQLiteProfileStore(db_path)
        if args.profile_command == "set":
            store.put(
                args.subject,
                UserProfile(bio=args.bio, experience=args.experience, projects=args.projects),
            )
            print(f"Saved profile for {args.subject} in {db_path}")
            return 0
        profile = store.get(args.subject)
    except ProfileStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(profile.to_dict(), ensure_ascii=False, indent=2))
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"ES Writer v{__version__}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parser = create_parser()
    args = parser.parse_args(argv)

    # Route to command handler
    if args.command == "serve":
        return cmd_serve(args)
    elif args.command == "answer":
        return cmd_answer(args)
    elif args.command == "profile":
        return cmd_profile(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
