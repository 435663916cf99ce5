import argparse
import json
import sys
import threading
import time
from contextlib import contextmanager

from dotenv import load_dotenv

load_dotenv()

from config.config import AppConfig
from models.errors import ConfigError
from models.pipeline import ErrorEnvelope, FinishMode, ResponseEnvelope
from orchestrator.core import ReasoningOrchestrator
from utils.token_tracker import TokenTracker

HELP_TEXT = """
=== Commands ===
help       show this message
stats      token usage for this session
exit/quit  leave
"""


def _spin(stop_event: threading.Event) -> None:
    frames = "|/-\\"
    i = 0
    while not stop_event.wait(0.1):
        sys.stdout.write(f"\r\033[93mThinking {frames[i % len(frames)]}\033[0m")
        sys.stdout.flush()
        i += 1
    sys.stdout.write("\r" + " " * 20 + "\r")
    sys.stdout.flush()


@contextmanager
def spinner():
    """Animate the console while the two model calls run."""
    stop_event = threading.Event()
    thread = threading.Thread(target=_spin, args=(stop_event,), daemon=True)
    thread.start()
    try:
        yield
    finally:
        stop_event.set()
        thread.join()


def print_envelope(envelope: ResponseEnvelope | ErrorEnvelope) -> None:
    if isinstance(envelope, ErrorEnvelope):
        print(f"\nError: {envelope.error}")
        if envelope.details:
            print(f"Details: {envelope.details}\n")
        return

    print("\n--- Reasoning ---")
    print(envelope.reasoning or "(empty)")
    print("\n--- Answer ---")
    if envelope.summary is None:
        print("(no answer: the search tool was unavailable)")
    elif isinstance(envelope.summary, str):
        print(envelope.summary)
    else:
        print(json.dumps(envelope.summary, indent=2))
    if envelope.tool:
        print(f"[Tool: {envelope.tool['name'] or '-'} ({envelope.tool['status']})]")
    usage = envelope.usage
    print(
        f"[Tokens used: reasoning {usage['reasoning_tokens']}, "
        f"summary {usage['summary_tokens']}, total {usage['total_tokens']}]\n"
    )


def ask(orchestrator: ReasoningOrchestrator, question: str, mode: FinishMode,
        token_tracker: TokenTracker) -> ResponseEnvelope | ErrorEnvelope:
    with spinner():
        envelope = orchestrator.handle({"question": question}, mode=mode)

    if isinstance(envelope, ResponseEnvelope):
        token_tracker.update(envelope.usage)
    print_envelope(envelope)
    return envelope


def repl(orchestrator: ReasoningOrchestrator, mode: FinishMode, token_tracker: TokenTracker) -> None:
    commands = {
        "help": lambda: print(HELP_TEXT),
        "stats": lambda: print(f"\n{token_tracker.format_summary()}\n"),
    }
    while True:
        try:
            line = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print()
            return
        if not line:
            continue
        command = line.lower()
        if command in ("exit", "quit"):
            return
        if command in commands:
            commands[command]()
        else:
            ask(orchestrator, line, mode, token_tracker)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ask a reasoning model, get a finished answer")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in FinishMode],
        default=FinishMode.PLAIN.value,
        help="How the finishing model answers",
    )
    parser.add_argument("question", nargs="*", help="Ask once and exit")
    args = parser.parse_args(argv)
    mode = FinishMode(args.mode)

    try:
        config = AppConfig.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e.message}")
        return 1

    orchestrator = ReasoningOrchestrator.from_config(config)
    token_tracker = TokenTracker()

    if args.question:
        envelope = ask(orchestrator, " ".join(args.question), mode, token_tracker)
        return 0 if isinstance(envelope, ResponseEnvelope) else 1

    print(f"\n=== {config.describe()} [{mode.value}] ===")
    print("Type 'help' for commands.\n")
    try:
        repl(orchestrator, mode, token_tracker)
    finally:
        if token_tracker.requests > 0:
            print(f"\n=== Session total ===\n{token_tracker.format_summary()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
