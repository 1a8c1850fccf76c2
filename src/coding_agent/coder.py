# coder.py
# Code-only responder used when a step decides on CodeGeneration.

import logging

from coding_agent.cost import CostTracker
from coding_agent.llm import GenerationPort

logger = logging.getLogger(__name__)

CODER_PROMPT = """\
You are an expert programmer. Your sole responsibility is to write clean, \
efficient and correct code.
You will be given the overall context of the project and a specific task to complete.

--- Context ---
{context}
--- End Context ---

Your current task is: "{task}"

Based on the context and the task, write the necessary code. Use the language \
the task asks for or implies; if it does not say, choose the most suitable one.
IMPORTANT: Output ONLY the raw code. Do not include explanations, commentary \
about the code, or markdown code fences.\
"""


class CodeGenerator:
    def __init__(self, client: GenerationPort, cost_tracker: CostTracker) -> None:
        self._client = client
        self._cost_tracker = cost_tracker

    def generate_code(self, task: str, context: str) -> str:
        prompt = CODER_PROMPT.format(task=task, context=context)
        logger.debug("Coder prompt:\n%s", prompt)

        usage = self._cost_tracker.record(self._client.generate(prompt))
        logger.debug("Coder response:\n%s", usage.content)

        # Trust the instruction; no fence stripping or validation.
        return usage.content.strip()
