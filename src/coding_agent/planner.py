# planner.py
# Turns a goal plus rendered context into an ordered list of step strings.

import logging
import re

from coding_agent.cost import CostTracker
from coding_agent.llm import GenerationPort

logger = logging.getLogger(__name__)

PLANNER_PROMPT = """\
You are a master planner AI. Your job is to create a detailed, step-by-step \
plan to accomplish a given programming goal.
The user's goal is: "{goal}"

--- CONTEXT ---
Here is the current context, including existing files and previous actions:
{context}
--- END CONTEXT ---

Break the goal down into a numbered list of simple, single-purpose steps. \
A good plan usually starts by gathering information (listing or reading files, \
searching), then implements (writing code), and finally verifies (running \
tests or commands).

Output ONLY the numbered list of steps, one step per line. Do not include a \
preamble or a conclusion.\
"""

_STEP_MARKER = re.compile(r"^\d+\. ")


def parse_plan(response: str) -> list[str]:
    """
    Split a numbered list into bare step descriptions.

    Blank lines are dropped. A leading "<digits>. " marker is removed;
    lines without one are kept as they are.
    """
    steps: list[str] = []
    for line in response.splitlines():
        line = line.strip()
        if not line:
            continue
        steps.append(_STEP_MARKER.sub("", line, count=1))
    return steps


class Planner:
    def __init__(self, client: GenerationPort, cost_tracker: CostTracker) -> None:
        self._client = client
        self._cost_tracker = cost_tracker

    def create_plan(self, goal: str, context: str) -> list[str]:
        prompt = PLANNER_PROMPT.format(goal=goal, context=context)
        logger.debug("Planner prompt:\n%s", prompt)

        usage = self._cost_tracker.record(self._client.generate(prompt))
        logger.debug("Planner response:\n%s", usage.content)

        return parse_plan(usage.content)
