"""
Command-line interface for quiz-engine

Runs a quiz in the terminal, resolves a result from a list of answers,
or checks a quiz configuration for problems.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import config
from .engine.resolver import Method
from .engine.session import (
    ErrorKind,
    Presenter,
    QuizSession,
    RenderError,
    RenderNoQuestions,
    RenderQuestion,
    RenderResult,
    dispatch,
)
from .errors import ConfigurationError, StorageError
from .quiz.schema import QuizDefinition, load_quiz_file
from .state import session_key_for
from .storage import get_store


class TerminalPresenter(Presenter):
    """Renders session signals as plain terminal text."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def render_question(self, signal: RenderQuestion) -> None:
        question = signal.question
        self._print()
        if signal.progress:
            p = signal.progress
            self._print(f"Question {p.current}/{p.total}  [{p.percent}%]")
        self._print(question.text or "Question")
        if question.image:
            self._print(f"  ({question.image_alt or question.image})")
        for i, option in enumerate(question.options, start=1):
            self._print(f"  {i}. {option.label}")

    def render_result(self, signal: RenderResult) -> None:
        result = signal.result
        self._print()
        self._print("=" * 60)
        self._print(result.title or "Result")
        self._print("=" * 60)
        if result.desc:
            self._print(result.desc)
        if result.cta:
            self._print(f"\n→ {result.cta.label}: {result.cta.link}")
        if signal.progress:
            self._print("\nComplete!")

    def render_no_questions(self, signal: RenderNoQuestions) -> None:
        self._print("This quiz has no questions configured.")

    def render_error(self, signal: RenderError) -> None:
        if signal.kind == ErrorKind.TRANSITION:
            self._print("Something went wrong. Please try again.")
        else:
            self._print(f"Error: {signal.message}")


def build_session(args, definition: QuizDefinition) -> QuizSession:
    """Create a session from CLI arguments and the global config."""
    settings = replace(config.quiz)
    if getattr(args, "method", None):
        settings.method = args.method
    if getattr(args, "persist", False):
        settings.persist = True
    if getattr(args, "no_progress", False):
        settings.show_progress = False
    if getattr(args, "no_restart", False):
        settings.restart_enabled = False

    storage = None
    if settings.persist:
        if getattr(args, "state_file", None):
            storage = get_store("file", path=args.state_file)
        else:
            storage = get_store(config.storage.backend, **config.storage.store_kwargs())

    return QuizSession(
        definition,
        session_key=session_key_for(getattr(args, "quiz_id", None) or "default"),
        storage=storage,
        settings=settings,
    )


def run_interactive(session: QuizSession, presenter: Presenter, read=None) -> int:
    """
    Drive a session from terminal input.

    Number selects an option, "b" goes back, "r" restarts from the result
    screen, "q" quits.

    Returns:
        Exit status
    """
    read = read or input
    signal = session.start()

    while True:
        dispatch(signal, presenter)

        if isinstance(signal, RenderNoQuestions):
            return 1

        if isinstance(signal, RenderError):
            if signal.kind != ErrorKind.TRANSITION:
                return 1
            signal = session.current()
            continue

        if isinstance(signal, RenderResult):
            if not signal.can_restart:
                return 0
            try:
                choice = read("\n[r] restart  [q] quit > ").strip().lower()
            except EOFError:
                return 0
            if choice == "r":
                signal = session.restart()
                continue
            return 0

        prompt = "[b] back  [q] quit > " if signal.can_go_back else "[q] quit > "
        try:
            choice = read(f"\nChoose 1-{len(signal.question.options)} {prompt}").strip().lower()
        except EOFError:
            return 0

        if choice == "q":
            return 0
        if choice == "b":
            signal = session.back()
            continue
        if choice.isdigit():
            signal = session.select(int(choice) - 1)
            continue
        # Unrecognised input; show the question again
        signal = session.current()


def resolve_answers(session: QuizSession, answers: List[int]):
    """Feed answers through a fresh session and return the final signal."""
    signal = session.start()
    for answer in answers:
        if not isinstance(signal, RenderQuestion):
            break
        signal = session.select(answer)
    return signal


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="quiz-engine",
        description="Run personality quizzes and resolve their results",
        epilog="Example: quiz-engine resolve quiz.json --answers 0 2 1 --json",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging (scores, tie-breaks, rule matches)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    method_choices = [m.value for m in Method]

    # Run command
    run_parser = subparsers.add_parser("run", help="Take a quiz in the terminal")
    run_parser.add_argument("config", help="Path to quiz configuration JSON")
    run_parser.add_argument("--quiz-id", default="default", help="Quiz instance id (default: default)")
    run_parser.add_argument("--method", choices=method_choices, help="Result resolution method")
    run_parser.add_argument("--persist", action="store_true", help="Save progress between runs")
    run_parser.add_argument("--state-file", help="JSON file for saved progress")
    run_parser.add_argument("--no-progress", action="store_true", help="Hide progress")
    run_parser.add_argument("--no-restart", action="store_true", help="Don't offer restart")

    # Resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve the result for given answers")
    resolve_parser.add_argument("config", help="Path to quiz configuration JSON")
    resolve_parser.add_argument(
        "--answers",
        nargs="*",
        type=int,
        default=[],
        help="Zero-based option index for each question, in order"
    )
    resolve_parser.add_argument("--method", choices=method_choices, help="Result resolution method")
    resolve_parser.add_argument("--json", action="store_true", help="Output result as JSON")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check a quiz configuration")
    validate_parser.add_argument("config", help="Path to quiz configuration JSON")
    validate_parser.add_argument("--json", action="store_true", help="Output report as JSON")

    # Parse arguments
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        definition = load_quiz_file(args.config)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.command == "validate":
        report = {
            "questions": definition.question_count,
            "results": len(definition.results),
            "categories": list(definition.categories),
            "diagnostics": definition.diagnostics,
        }
        if args.json:
            report["quiz"] = definition.to_dict()
            print(json.dumps(report, indent=2))
        else:
            print(f"Questions:  {report['questions']}")
            print(f"Results:    {report['results']}")
            print(f"Categories: {', '.join(report['categories']) or '(none)'}")
            if definition.diagnostics:
                print(f"\nProblems ({len(definition.diagnostics)}):")
                for message in definition.diagnostics:
                    print(f"  - {message}")
            else:
                print("\nNo problems found.")
        return 1 if definition.is_empty else 0

    if args.command == "resolve":
        settings = replace(config.quiz, persist=False)
        if args.method:
            settings.method = args.method
        session = QuizSession(definition, "resolve", settings=settings)
        signal = resolve_answers(session, args.answers)

        if isinstance(signal, RenderResult):
            if args.json:
                output = {
                    "result": signal.result.to_dict(),
                    "scores": signal.scores,
                    "tags": list(signal.tags),
                    "progress": signal.progress.to_dict() if signal.progress else None,
                }
                print(json.dumps(output, indent=2))
            else:
                TerminalPresenter().render_result(signal)
            return 0

        if isinstance(signal, RenderQuestion):
            message = f"Only {signal.index} of {definition.question_count} questions answered"
        elif isinstance(signal, RenderNoQuestions):
            message = "This quiz has no questions configured"
        else:
            message = signal.message
        if args.json:
            print(json.dumps({"result": None, "error": message}, indent=2))
        else:
            print(message, file=sys.stderr)
        return 1

    if args.command == "run":
        try:
            session = build_session(args, definition)
            return run_interactive(session, TerminalPresenter())
        except StorageError as e:
            print(f"Storage error: {e}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            print()
            return 130

    return 1


if __name__ == "__main__":
    sys.exit(main())
