# tools.py
# Action Dispatcher: executes a validated Action against the outside world.
#
# Every handler returns the output text on success and raises ToolError on
# failure. The orchestrator decides what a failure means for the run.

import logging
import os
import subprocess
from typing import Callable

import httpx

from coding_agent.errors import InvalidAction, ToolError
from coding_agent.models import (
    Action,
    CodeGeneration,
    ListFiles,
    ReadFile,
    RunCommand,
    Search,
    WriteFile,
)

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
SEARCH_RESULT_LIMIT = 3

# Build-artifact and version-control directories never listed.
EXCLUDED_DIRS = frozenset(
    {".git", ".hg", ".svn", "target", "build", "dist", "__pycache__", ".venv", "node_modules"}
)


def _has_excluded_segment(path: str) -> bool:
    return not EXCLUDED_DIRS.isdisjoint(os.path.normpath(path).split(os.sep))


class ActionDispatcher:
    """
    Maps each Action variant to one external effect.

    The search credential is fixed at construction; CodeGeneration is not
    dispatchable and must be routed to the code generator by the caller.
    """

    def __init__(
        self,
        search_api_key: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._search_api_key = search_api_key
        self._http = http_client
        self._handlers: dict[str, Callable[..., str]] = {
            "ReadFile": self._tool_read_file,
            "WriteFile": self._tool_write_file,
            "RunCommand": self._tool_run_command,
            "Search": self._tool_search,
            "ListFiles": self._tool_list_files,
            "CodeGeneration": self._tool_code_generation,
        }

    def execute(self, action: Action) -> str:
        logger.debug("Dispatching %s %s", action.tool_name, action.parameters())
        return self._handlers[action.tool_name](action)

    # ------------------------------------------------------------------
    # Filesystem
    # ------------------------------------------------------------------

    def _tool_read_file(self, action: ReadFile) -> str:
        try:
            with open(action.path, "r", encoding="utf-8") as fh:
                return fh.read()
        except UnicodeDecodeError as exc:
            raise ToolError(f"File {action.path} is not valid UTF-8 text: {exc}") from exc
        except OSError as exc:
            raise ToolError(f"Could not read {action.path}: {exc}") from exc

    def _tool_write_file(self, action: WriteFile) -> str:
        try:
            with open(action.path, "w", encoding="utf-8") as fh:
                fh.write(action.content)
        except OSError as exc:
            raise ToolError(f"Could not write {action.path}: {exc}") from exc
        return "File written successfully."

    def _tool_list_files(self, action: ListFiles) -> str:
        paths: list[str] = []
        for dirpath, dirnames, filenames in os.walk(action.path):
            # The root itself may sit inside an excluded tree.
            if _has_excluded_segment(dirpath):
                dirnames[:] = []
                continue
            # Prune in place so excluded trees are never entered.
            dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
            for name in sorted(filenames):
                paths.append(os.path.join(dirpath, name))
        return "".join(f"{path}\n" for path in paths)

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------

    def _tool_run_command(self, action: RunCommand) -> str:
        try:
            completed = subprocess.run(
                action.command,
                shell=True,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise ToolError(f"Could not start command {action.command!r}: {exc}") from exc

        if completed.returncode == 0:
            return completed.stdout
        # Nonzero exit is data for the model, not a dispatcher failure.
        logger.info("Command %r exited with status %d", action.command, completed.returncode)
        return f"STDOUT:\n{completed.stdout}\nSTDERR:\n{completed.stderr}"

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def _tool_search(self, action: Search) -> str:
        if not self._search_api_key:
            raise ToolError("API key for Brave Search is not set in the environment variables")

        logger.info("Performing web search for: %s", action.query)
        http = self._http or httpx.Client(timeout=30.0)
        try:
            response = http.get(
                BRAVE_SEARCH_URL,
                params={"q": action.query},
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self._search_api_key,
                },
            )
        except httpx.HTTPError as exc:
            raise ToolError(f"Brave Search request failed: {exc}") from exc
        finally:
            if self._http is None:
                http.close()

        if not response.is_success:
            raise ToolError(f"Brave Search API Error ({response.status_code}): {response.text}")

        try:
            results = (response.json().get("web") or {}).get("results", [])
            lines = [
                f"[Result {i}]\nTitle: {r['title']}\nURL: {r['url']}\nSnippet: {r['description']}\n\n"
                for i, r in enumerate(results[:SEARCH_RESULT_LIMIT], start=1)
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ToolError(f"Brave Search returned an unexpected body: {exc}") from exc
        if not lines:
            return "No results found."
        return "".join(lines)

    # ------------------------------------------------------------------
    # Not dispatchable
    # ------------------------------------------------------------------

    def _tool_code_generation(self, action: CodeGeneration) -> str:
        raise InvalidAction("CodeGeneration is not a runnable tool.")
