#!/usr/bin/env python3
"""
Chat Agent Interactive CLI

A command-line interface for searching the chat transcripts and trying
out the agent loop without starting the HTTP server.
"""

import argparse
import json
import logging
import signal
import sys
import threading
from typing import Optional

from .config import config
from .errors import RunCancelledError
from .llm_call import LLMClient
from .orchestration import AgentOrchestrator, RunResult
from .tools import ToolRegistry, find_matches
from .tools.chat_search import MISSING_DIR_NOTE, resolve_chats_dir

# Global shutdown flag for signal handling
_shutdown_requested = threading.Event()

logger = logging.getLogger(__name__)


def _signal_handler(signum: int, frame) -> None:
    """Handle SIGINT for graceful shutdown."""
    if _shutdown_requested.is_set():
        # Second interrupt - force exit
        logger.debug("Force shutdown requested")
        sys.exit(1)
    logger.debug("Shutdown requested")
    _shutdown_requested.set()
    print("\n\nShutting down... (press Ctrl+C again to force)")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def print_banner() -> None:
    """Print the welcome banner."""
    banner = """
╔════════════════════════════════════════════════════════════════╗
║                    Chat Agent Interactive                       ║
║                                                                 ║
║  Transcript search and a step-limited tool-using agent          ║
╚════════════════════════════════════════════════════════════════╝

Available commands:
  /help          - Show this help message
  /search TEXT   - Search the chat transcripts for TEXT
  /steps N       - Set the step budget for the next goals
  /trace         - Show the transcript of the last run
  /tools         - List available tools
  /quit          - Exit the CLI

Anything else is sent to the agent as a goal.
"""
    print(banner)


def print_tools() -> None:
    """Print the registered tools."""
    print("\nAvailable Tools:")
    print("─" * 64)
    print(ToolRegistry.get_tools_summary())
    print()


def print_trace(result: Optional[RunResult]) -> None:
    """Print the transcript of the last agent run."""
    if result is None:
        print("\nNo trace available. Run a goal first.\n")
        return

    print("\n" + "═" * 70)
    print(f"AGENT TRANSCRIPT (llm: {result.mode.value})")
    print("═" * 70)

    for entry in result.transcript:
        decision = entry.decision
        print(f"\n┌─ Step {entry.step}" + ("  [FINAL]" if decision.is_final else ""))
        print("│")
        print(f"│  Tool: {decision.tool}")
        if decision.input:
            print(f"│  Input: {decision.input}")
        if decision.notes:
            print(f"│  Notes: {decision.notes}")
        if entry.observation is not None:
            obs = json.dumps(entry.observation)
            if len(obs) > 200:
                obs = obs[:200] + "..."
            print(f"│  Observation: {obs}")
        print("└" + "─" * 68)

    print()


def search_transcripts(question: str) -> dict:
    """Run the transcript search the way POST /api/question does."""
    chats_dir = resolve_chats_dir()
    if not chats_dir.is_dir():
        return {"matches": [], "note": MISSING_DIR_NOTE}
    return {"matches": find_matches(question, chats_dir)}


class InteractiveCLI:
    """Interactive CLI for the chat agent."""

    def __init__(self, llm_client: Optional[LLMClient] = None, max_steps: Optional[int] = None):
        """Initialize the CLI."""
        self.llm_client = llm_client
        self.max_steps = max_steps
        self.last_result: Optional[RunResult] = None

    def process_goal(self, goal: str) -> bool:
        """Run the agent for a goal.

        Returns:
            True if should continue, False if shutdown requested
        """
        print("\n" + "─" * 70)
        print("Running agent...")
        print("─" * 70 + "\n")

        try:
            orchestrator = AgentOrchestrator(llm_client=self.llm_client)
            result = orchestrator.run(goal, self.max_steps)
        except KeyboardInterrupt:
            _shutdown_requested.set()
            print("\n\nRun interrupted, shutting down.\n")
            return False
        except Exception as e:
            print(f"\nError: {e}\n")
            logger.debug("Agent run failed", exc_info=True)
            return True

        self.last_result = result
        if _shutdown_requested.is_set():
            print("\n\nRun completed, shutting down.\n")
            return False

        print("\n" + "═" * 70)
        print("ANSWER")
        print("═" * 70)
        print(result.answer)
        print("═" * 70 + "\n")
        print(
            f"(Completed in {result.steps} step{'s' if result.steps != 1 else ''}, "
            f"llm: {result.mode.value})"
        )
        print("Use /trace to see the full transcript.\n")
        return True

    def process_search(self, question: str) -> None:
        """Search the transcripts and print every matching line."""
        if not question:
            print("\nUsage: /search TEXT\n")
            return
        try:
            result = search_transcripts(question)
        except OSError as e:
            print(f"\nSearch error: {e}\n")
            return
        if "note" in result:
            print(f"\n{result['note']}\n")
            return
        print()
        for match in result["matches"]:
            print(f"{match['file']}:{match['line']}: {match['text']}")
        print(f"\n({len(result['matches'])} matches)\n")

    def set_steps(self, value: str) -> None:
        """Set the step budget used for the following goals."""
        try:
            self.max_steps = int(value)
        except ValueError:
            print("\nUsage: /steps N\n")
            return
        print(f"\nStep budget: {self.max_steps} (clamped into [1, 5])\n")

    def run(self) -> None:
        """Run the interactive CLI loop."""
        print_banner()

        while not _shutdown_requested.is_set():
            try:
                user_input = input(">>> ").strip()

                if _shutdown_requested.is_set():
                    break

                if not user_input:
                    continue

                if user_input.startswith("/"):
                    command, _, argument = user_input.partition(" ")
                    command = command.lower()
                    argument = argument.strip()

                    if command in ("/quit", "/exit", "/q"):
                        print("\nGoodbye!\n")
                        break
                    elif command in ("/help", "/h", "/?"):
                        print_banner()
                    elif command == "/search":
                        self.process_search(argument)
                    elif command == "/steps":
                        self.set_steps(argument)
                    elif command == "/trace":
                        print_trace(self.last_result)
                    elif command == "/tools":
                        print_tools()
                    else:
                        print(f"\nUnknown command: {user_input}")
                        print("Type /help for available commands.\n")
                elif not self.process_goal(user_input):
                    break

            except KeyboardInterrupt:
                if _shutdown_requested.is_set():
                    print("\n")
                    break
                print("\n\nType /quit to exit.\n")
            except EOFError:
                print("\nGoodbye!\n")
                break

        self.cleanup()

    def cleanup(self) -> None:
        """Clean up resources."""
        if self.llm_client is not None:
            self.llm_client.close()


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGINT, _signal_handler)

    parser = argparse.ArgumentParser(
        description="Chat Agent Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Start interactive mode
  %(prog)s -g "2*(3+4)"             # Run a single goal, print the RunResult
  %(prog)s -g "invoice" -n 2        # Same, with a two-step budget
  %(prog)s --question "refund"      # Search the transcripts and exit
""",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "-g",
        "--goal",
        type=str,
        help="Run a single goal and exit",
    )

    parser.add_argument(
        "-n",
        "--max-steps",
        type=int,
        default=None,
        help=f"Step budget, clamped into [1, 5] (default: {config.agent.default_max_steps})",
    )

    parser.add_argument(
        "--question",
        type=str,
        help=f"Search the transcripts in {config.tools.chats_dir} and exit",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.question:
        print(json.dumps(search_transcripts(args.question), indent=2))
        return

    llm_client = LLMClient() if config.agent.remote_enabled else None
    try:
        if args.goal:
            try:
                result = AgentOrchestrator(llm_client=llm_client).run(args.goal, args.max_steps)
            except RunCancelledError as e:
                logger.warning(f"Agent run cancelled: {e}")
                print(json.dumps({"error": str(e)}, indent=2))
                sys.exit(1)
            print(json.dumps(result.to_dict(), indent=2))
        else:
            cli = InteractiveCLI(llm_client=llm_client, max_steps=args.max_steps)
            cli.run()
    finally:
        if llm_client is not None:
            llm_client.close()


if __name__ == "__main__":
    main()
