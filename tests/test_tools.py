import os
from unittest.mock import MagicMock, patch

import httpx
import pytest

from coding_agent.errors import InvalidAction, ToolError
from coding_agent.models import CodeGeneration, ListFiles, ReadFile, RunCommand, Search, WriteFile
from coding_agent.tools import BRAVE_SEARCH_URL, ActionDispatcher

# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


def test_read_file(tmp_path):
    target = tmp_path / "notes.txt"
    target.write_text("hello\nworld", encoding="utf-8")

    assert ActionDispatcher().execute(ReadFile(path=str(target))) == "hello\nworld"


def test_read_missing_file(tmp_path):
    with pytest.raises(ToolError, match="Could not read"):
        ActionDispatcher().execute(ReadFile(path=str(tmp_path / "missing.txt")))


def test_read_binary_file(tmp_path):
    target = tmp_path / "blob.bin"
    target.write_bytes(b"\xff\xfe\x00\x80")

    with pytest.raises(ToolError, match="not valid UTF-8"):
        ActionDispatcher().execute(ReadFile(path=str(target)))


def test_write_file_replaces_content(tmp_path):
    target = tmp_path / "out.py"
    target.write_text("old content that is longer", encoding="utf-8")

    result = ActionDispatcher().execute(WriteFile(path=str(target), content="new"))

    assert result == "File written successfully."
    assert target.read_text(encoding="utf-8") == "new"


def test_write_file_missing_parent(tmp_path):
    target = tmp_path / "no" / "such" / "dir" / "out.py"

    with pytest.raises(ToolError, match="Could not write"):
        ActionDispatcher().execute(WriteFile(path=str(target), content="x"))
    assert not target.parent.exists()


def test_list_files_skips_build_and_vcs_dirs(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("")
    (tmp_path / "README.md").write_text("")
    (tmp_path / "target" / "debug").mkdir(parents=True)
    (tmp_path / "target" / "debug" / "app").write_text("")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("")
    (tmp_path / "src" / "__pycache__").mkdir()
    (tmp_path / "src" / "__pycache__" / "main.cpython-312.pyc").write_text("")

    listing = ActionDispatcher().execute(ListFiles(path=str(tmp_path))).splitlines()

    assert sorted(listing) == sorted(
        [os.path.join(str(tmp_path), "README.md"), os.path.join(str(tmp_path), "src", "main.py")]
    )


@pytest.mark.parametrize("root", ["target", "target/debug", ".git", "src/__pycache__"])
def test_list_files_root_inside_excluded_dir(tmp_path, monkeypatch, root):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "target" / "debug").mkdir(parents=True)
    (tmp_path / "target" / "debug" / "app").write_text("")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("")
    (tmp_path / "src" / "__pycache__").mkdir(parents=True)
    (tmp_path / "src" / "__pycache__" / "main.cpython-312.pyc").write_text("")

    assert ActionDispatcher().execute(ListFiles(path=root)) == ""


def test_list_files_relative_root_keeps_its_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("")

    assert ActionDispatcher().execute(ListFiles(path="src")) == os.path.join("src", "main.py") + "\n"


def test_list_files_empty_and_missing(tmp_path):
    dispatcher = ActionDispatcher()
    assert dispatcher.execute(ListFiles(path=str(tmp_path))) == ""
    assert dispatcher.execute(ListFiles(path=str(tmp_path / "nope"))) == ""


# ---------------------------------------------------------------------------
# Process
# ---------------------------------------------------------------------------


def test_run_command_success_returns_stdout():
    assert ActionDispatcher().execute(RunCommand(command="echo hi")) == "hi\n"


def test_run_command_nonzero_exit_is_not_an_error():
    result = ActionDispatcher().execute(RunCommand(command="exit 1"))
    assert "STDOUT:" in result
    assert "STDERR:" in result


def test_run_command_failure_captures_both_streams():
    result = ActionDispatcher().execute(
        RunCommand(command="echo partial; echo broken 1>&2; exit 3")
    )
    assert result == "STDOUT:\npartial\n\nSTDERR:\nbroken\n"


@patch("coding_agent.tools.subprocess.run", side_effect=OSError("no shell"))
def test_run_command_spawn_failure(mock_run):
    with pytest.raises(ToolError, match="no shell"):
        ActionDispatcher().execute(RunCommand(command="ls"))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _search_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_search_without_key_does_no_io():
    http = MagicMock()
    with pytest.raises(ToolError, match="Brave Search"):
        ActionDispatcher(http_client=http).execute(Search(query="python"))
    http.get.assert_not_called()


def test_search_formats_top_three_results():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["token"] = request.headers.get("X-Subscription-Token")
        results = [
            {"title": f"Title {i}", "url": f"https://example.com/{i}", "description": f"Snippet {i}"}
            for i in range(1, 6)
        ]
        return httpx.Response(200, json={"web": {"results": results}})

    dispatcher = ActionDispatcher(search_api_key="brave-key", http_client=_search_client(handler))
    result = dispatcher.execute(Search(query="rust async"))

    assert seen["url"].startswith(BRAVE_SEARCH_URL)
    assert "q=rust" in seen["url"]
    assert seen["token"] == "brave-key"
    assert result.startswith(
        "[Result 1]\nTitle: Title 1\nURL: https://example.com/1\nSnippet: Snippet 1\n\n"
    )
    assert "[Result 3]" in result
    assert "[Result 4]" not in result


def test_search_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="bad token")

    dispatcher = ActionDispatcher(search_api_key="k", http_client=_search_client(handler))
    with pytest.raises(ToolError, match="bad token"):
        dispatcher.execute(Search(query="x"))


def test_search_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable")

    dispatcher = ActionDispatcher(search_api_key="k", http_client=_search_client(handler))
    with pytest.raises(ToolError, match="unreachable"):
        dispatcher.execute(Search(query="x"))


def test_search_no_results():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"query": {"original": "x"}})

    dispatcher = ActionDispatcher(search_api_key="k", http_client=_search_client(handler))
    assert dispatcher.execute(Search(query="x")) == "No results found."


# ---------------------------------------------------------------------------
# Not dispatchable
# ---------------------------------------------------------------------------


@patch("coding_agent.tools.subprocess.run")
@patch("coding_agent.tools.os.walk")
def test_code_generation_is_invalid_action(mock_walk, mock_run):
    http = MagicMock()
    dispatcher = ActionDispatcher(search_api_key="k", http_client=http)

    with pytest.raises(InvalidAction):
        dispatcher.execute(CodeGeneration(task="write code"))

    mock_walk.assert_not_called()
    mock_run.assert_not_called()
    http.get.assert_not_called()


def test_invalid_action_is_not_a_tool_error():
    assert not issubclass(InvalidAction, ToolError)
