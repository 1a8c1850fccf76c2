# run.py
# Entry point. Config and wiring only: no logic lives here.
#
#   coding-agent --provider ollama "add a hello world script"
#   coding-agent                       # interactive, one goal at a time

import argparse
import logging
import sys

from rich.logging import RichHandler

from coding_agent import display
from coding_agent.config import AppConfig
from coding_agent.cost import CostTracker
from coding_agent.errors import AgentError
from coding_agent.llm import GenerationPort, Provider, create_client
from coding_agent.orchestrator import Orchestrator
from coding_agent.tools import ActionDispatcher

logger = logging.getLogger("coding_agent")

EXIT_WORDS = {"quit", "exit"}


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="coding-agent",
        description="A CLI coding agent powered by large language models.",
    )
    providers = [p.value for p in Provider]
    parser.add_argument("goal", nargs="?", help="Goal to run once. Omit for interactive mode.")
    parser.add_argument(
        "--provider",
        choices=providers,
        default=Provider.OPENAI.value,
        help="Backend used for code generation (default: openai).",
    )
    parser.add_argument(
        "--reasoning-provider",
        choices=providers,
        default=Provider.OPENAI.value,
        help="Backend used for planning and tool decisions (default: openai).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log prompts and responses.")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
    )


def run_goal(
    goal: str,
    config: AppConfig,
    provider: str,
    reasoning_provider: str,
    cost_tracker: CostTracker,
) -> bool:
    """Run a single goal with fresh clients and history. Returns True on success."""
    display.goal_received(goal)
    clients: list[GenerationPort] = []
    try:
        clients.append(create_client(provider, config))
        clients.append(create_client(reasoning_provider, config))
        orchestrator = Orchestrator(
            goal,
            llm_client=clients[0],
            cost_tracker=cost_tracker,
            reasoning_client=clients[1],
            dispatcher=ActionDispatcher(search_api_key=config.brave_search_api_key),
        )
        orchestrator.run()
    except AgentError as exc:
        logger.error("Orchestrator failed: %r", exc)
        display.run_failed(str(exc))
        return False
    finally:
        for client in clients:
            client.close()
        display.session_cost(cost_tracker.total)

    display.run_complete(len(orchestrator.history))
    return True


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    config = AppConfig.load()
    cost_tracker = CostTracker()
    display.banner(args.provider, args.reasoning_provider)

    if args.goal is not None:
        goal = args.goal.strip()
        if not goal:
            display.empty_goal()
            return 1
        ok = run_goal(goal, config, args.provider, args.reasoning_provider, cost_tracker)
        return 0 if ok else 1

    while True:
        try:
            goal = display.prompt_goal().strip()
        except (EOFError, KeyboardInterrupt):
            display.goodbye()
            return 0

        if goal.lower() in EXIT_WORDS:
            display.goodbye()
            return 0
        if not goal:
            display.empty_goal()
            continue

        run_goal(goal, config, args.provider, args.reasoning_provider, cost_tracker)


if __name__ == "__main__":
    sys.exit(main())
