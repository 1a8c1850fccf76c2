# decider.py
# Decision Resolver: asks the reasoning model which tool to use for a step
# and validates the reply into a closed Action union.
#
# This is the only boundary where model output becomes an executable action.
# Anything that does not match one of the six tools exactly is rejected.

import json
import logging

from pydantic import TypeAdapter, ValidationError

from coding_agent.cost import CostTracker
from coding_agent.errors import ParseError
from coding_agent.llm import GenerationPort
from coding_agent.models import Action, Decision

logger = logging.getLogger(__name__)

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)

DECISION_PROMPT = """\
You are the reasoning engine for a CLI agent. Your job is to decide which tool \
to use to accomplish the current step of a plan.
You must respond in a specific JSON format.

--- CONTEXT ---
{context}
--- END CONTEXT ---

--- CURRENT STEP ---
{step}
--- END CURRENT STEP ---

Based on the context and the current step, which tool should be used?
Available tools and their parameters:
1. ReadFile {{"path": "path/to/file.ext"}}: examine the contents of an existing file.
2. WriteFile {{"path": "path/to/save.ext", "content": "The content to write"}}: \
save content to a file. For code, use CodeGeneration instead.
3. RunCommand {{"command": "e.g., pytest -q"}}: execute a shell command, such as \
running tests, building code or installing dependencies.
4. Search {{"query": "Your search query"}}: look up current information or \
research a library or API.
5. ListFiles {{"path": "."}}: see the layout of a directory.
6. CodeGeneration {{"task": "A clear, specific instruction for the coder agent"}}: \
use when the step requires writing code. The task is a detailed prompt for \
another AI that will ONLY write the code.

--- RESPONSE FORMAT ---
Respond with a single JSON object matching this structure:
{{
  "thought": "Why this tool is the best choice for the current step.",
  "tool_name": "ReadFile",
  "parameters": {{"path": "src/main.py"}},
  "file_path": "path/to/save.ext"
}}
Include "file_path" ONLY with CodeGeneration, to say where the generated code \
should be saved. Otherwise omit it.

Now, make your decision for the current step.\
"""


def build_decision_prompt(step: str, context: str) -> str:
    return DECISION_PROMPT.format(step=step, context=context)


def parse_decision(response: str) -> Decision:
    """
    Parse a JSON decision into a Decision.

    Raises ParseError on malformed JSON, an unknown tool_name, or any missing
    or mistyped field. There is no fallback action.
    """
    # Strict mode: a raw control character inside a string is malformed JSON.
    try:
        data = json.loads(response)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Decision is not valid JSON: {exc}. Response: {response}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"Decision must be a JSON object. Response: {response}")
    if "tool_name" not in data:
        raise ParseError(f"Decision is missing 'tool_name'. Response: {response}")

    parameters = data.get("parameters", {})
    if not isinstance(parameters, dict):
        raise ParseError(f"Decision 'parameters' must be an object. Response: {response}")

    try:
        action = _ACTION_ADAPTER.validate_python({**parameters, "tool_name": data["tool_name"]})
        return Decision(
            thought=data.get("thought"),
            action=action,
            file_path=data.get("file_path"),
        )
    except ValidationError as exc:
        raise ParseError(f"Failed to parse tool decision: {exc}. Response: {response}") from exc


class DecisionResolver:
    def __init__(self, client: GenerationPort, cost_tracker: CostTracker) -> None:
        self._client = client
        self._cost_tracker = cost_tracker

    def decide(self, step: str, context: str) -> Decision:
        prompt = build_decision_prompt(step, context)
        logger.debug("Decision prompt:\n%s", prompt)

        usage = self._cost_tracker.record(self._client.generate_structured(prompt))
        logger.debug("Decision response:\n%s", usage.content)

        return parse_decision(usage.content)
