# state.py
# Goal and append-only history for a single run, rendered into prompt context.

from coding_agent.models import HistoryEntry

CONTEXT_ENTRY_LIMIT = 500
ELLIPSIS = "..."
EMPTY_HISTORY = "No actions have been taken yet."


def _truncate(content: str, limit: int = CONTEXT_ENTRY_LIMIT) -> str:
    # str slicing is by code point, so multi-byte characters stay whole.
    if len(content) > limit:
        return content[:limit] + ELLIPSIS
    return content


class ContextStore:
    """
    Owns the goal and the ordered history of a run.

    Sub-agents only ever see the output of render(); they never get a
    reference to the store itself.
    """

    def __init__(self, goal: str) -> None:
        if not goal or not goal.strip():
            raise ValueError("Goal must be a non-empty string.")
        self._goal = goal
        self._entries: list[HistoryEntry] = []

    @property
    def goal(self) -> str:
        return self._goal

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, label: str, content: str) -> None:
        self._entries.append(HistoryEntry(label=label, content=content))

    def render(self) -> str:
        lines = [f"The overall goal is: {self._goal}", "", "--- History & Context ---"]
        if not self._entries:
            lines.append(EMPTY_HISTORY)
        for entry in self._entries:
            lines.append(f"[{entry.label}]")
            lines.append(_truncate(entry.content))
            lines.append("---")
        return "\n".join(lines) + "\n"
