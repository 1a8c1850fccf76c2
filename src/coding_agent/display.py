# display.py
# All terminal output for the coding agent.
#
# This module owns presentation entirely. The orchestrator and the CLI never
# format strings for the console; they call named functions here.
#
# Colour language:
#   cyan    - session and step routing
#   yellow  - thinking (context, planning)
#   magenta - decisions and tool use
#   green   - success
#   red     - failures and aborts

import json

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from coding_agent.models import Action, Decision

console = Console()

TOOL_OUTPUT_PREVIEW = 300


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        value = value[:max_len] + "..."
    return escape(value)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def banner(provider: str, reasoning_provider: str) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]CLI Coding Agent[/bold cyan]\n"
            "[dim]Plan, decide, act. One step at a time.[/dim]\n\n"
            f"[dim]Code model      :[/dim] [white]{provider}[/white]\n"
            f"[dim]Reasoning model :[/dim] [white]{reasoning_provider}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def prompt_goal() -> str:
    console.print()
    return console.input("[bold yellow]//: PRIMARY DIRECTIVE:[/bold yellow] ")


def empty_goal() -> None:
    console.print("[red]Goal cannot be empty. Please enter a valid goal.[/red]")


def goodbye() -> None:
    console.print("[bold cyan]Exiting agent. Goodbye![/bold cyan]")


def goal_received(goal: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW OBJECTIVE[/cyan]", style="cyan"))
    console.print(
        Panel(
            f"[white]{escape(goal)}[/white]",
            title=_label("OBJECTIVE", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


def session_cost(total: float) -> None:
    console.print(f"[bold green]Current session cost:[/bold green] [green]${total:.4f}[/green]")


# ---------------------------------------------------------------------------
# Context and planning
# ---------------------------------------------------------------------------


def gathering_context() -> None:
    console.print()
    console.print("[yellow]Gathering initial context...[/yellow]")


def context_gathered(file_count: int) -> None:
    console.print(f"   [green]Found existing file structure ({file_count} files).[/green]")


def planning() -> None:
    console.print("[yellow]Thinking... creating a plan...[/yellow]")


def plan_created(steps: list[str]) -> None:
    console.print()
    if not steps:
        console.print("[yellow]Planner returned no steps. Nothing to execute.[/yellow]")
        return

    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="cyan",
        show_header=True,
        header_style="bold cyan",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Step", style="white")
    for i, step in enumerate(steps, start=1):
        table.add_row(str(i), escape(step))

    console.print(
        Panel(table, title=_label("PLAN CREATED", "cyan"), border_style="cyan", padding=(0, 1))
    )


# ---------------------------------------------------------------------------
# Execution loop
# ---------------------------------------------------------------------------


def step_start(index: int, total: int, step: str) -> None:
    console.print()
    console.print(f"[bold cyan]> STEP [{index + 1}/{total}][/bold cyan]  [white]{escape(step)}[/white]")


def decision_made(decision: Decision) -> None:
    console.print(f"  [magenta]Thought[/magenta]  [dim white]{_mono(decision.thought, 200)}[/dim white]")


def tool_use(action: Action) -> None:
    console.print(
        f"  [magenta]Action[/magenta]   [bold white]{action.tool_name}[/bold white]"
        f"  [dim]{_mono(json.dumps(action.parameters()), 160)}[/dim]"
    )


def tool_success(output: str) -> None:
    console.print(
        f"  [bold green]Tool success:[/bold green] [white]{_mono(output, TOOL_OUTPUT_PREVIEW)}[/white]"
    )


def tool_error(error: Exception) -> None:
    console.print(f"  [bold red]Tool error:[/bold red] [white]{escape(str(error))}[/white]")


def writing_code(task: str) -> None:
    console.print(f"  [magenta]Writing code for:[/magenta] [white]{_mono(task, 200)}[/white]")


def code_generated(code: str) -> None:
    console.print(
        Panel(
            Syntax(code, "text", word_wrap=True),
            title=_label("GENERATED CODE", "green"),
            border_style="green",
            padding=(0, 1),
        )
    )


def code_generation_failed(error: Exception) -> None:
    console.print(f"  [bold red]Code generation failed:[/bold red] [white]{escape(str(error))}[/white]")


def saving_code(path: str) -> None:
    console.print(f"  [magenta]Saving code to[/magenta] [white]'{escape(path)}'[/white]...")


def code_saved(path: str) -> None:
    console.print(f"  [bold green]Success:[/bold green] code saved to {escape(path)}")


def code_save_failed(path: str, error: Exception) -> None:
    console.print(f"  [bold red]Error:[/bold red] failed to save code to {escape(path)}: {escape(str(error))}")


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


def run_complete(history_size: int) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold green]Task completed successfully.[/bold green]\n"
            f"[dim]{history_size} history entries recorded.[/dim]",
            title=_label("DONE", "green"),
            border_style="green",
            padding=(0, 2),
        )
    )


def run_failed(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("TASK FAILED", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
