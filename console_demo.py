"""
Offline console demo: runs support conversations without a backend server.

Drives the real dialogue engine, session store and slot manager against
the in-memory order store. No HTTP, no network calls. Designed for live
demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario refund
    python console_demo.py --scenario escalation
"""

import argparse
import asyncio

from src.config import settings
from src.conversation.dialogue_engine import DialogueEngine
from src.conversation.session_store import SessionStore
from src.prompts.reply_templates import render_reply
from src.tools.mock_backend import InMemoryBackend

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

CONSOLE_SESSION_KEY = "console"


class ConsoleSession:
    """Simulates a support chat in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "tracking": [
            "hello",
            "I want to track my package",
            "ORD1002",
            "track ORD1003",
            "bye",
        ],
        "refund": [
            "I'd like a refund",
            "it is ORD1001",
            "refund status RFD-UNKNOWN",
            "thanks",
        ],
        "complaint": [
            "I want to complain about ORD1002, the box was damaged",
            "complaint for ORD1002 again",
            "bye",
        ],
        "return": [
            "return ORD1001",
            "return ORD1004",
            "thanks",
        ],
        "escalation": [
            "refund please",
            "not sure",
            "I do not know",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self) -> None:
        self.backend = InMemoryBackend.with_sample_data()
        self.engine = DialogueEngine(
            backend=self.backend,
            sessions=SessionStore(idle_ttl_sec=0),
        )

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Assistant]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  ORDER SUPPORT ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _summary(self, label: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {label}{RESET}")
        print(
            f"{DIM}  Records: {len(self.backend.refunds)} refund(s), "
            f"{len(self.backend.complaints)} complaint(s), "
            f"{len(self.backend.returns)} return(s){RESET}"
        )
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return
        asyncio.run(self._play(scenario, steps))

    async def _play(self, scenario: str, steps: list[str]) -> None:
        self._banner(f"Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[Customer] {RESET}{step}")
            await self._process_input(step)
        self._summary(f"Scenario '{scenario}' complete.")

    def run(self) -> None:
        asyncio.run(self._interactive())

    async def _interactive(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Type 'quit' to exit. Sample orders: ORD1001-ORD1005{RESET}")

        while True:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[Customer] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                break

            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("That was quite long. Could you keep it brief for me?")
                continue

            await self._process_input(user_input)

        self._summary("Conversation complete.")

    async def _process_input(self, text: str) -> None:
        result = await self.engine.process_turn(text, CONSOLE_SESSION_KEY)
        self.agent_say(render_reply(result))

        session = self.engine.sessions.get_or_create(CONSOLE_SESSION_KEY)
        pending = session.pending_intent.value if session.pending_intent else "none"
        self.system_log(
            f"Intent: {result.intent.value} | Outcome: {result.outcome.value} | "
            f"Pending: {pending} | Retries: {session.retry_count}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
