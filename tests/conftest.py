import pytest

from coding_agent.errors import GenerationError
from coding_agent.models import UsageRecord


class FakeClient:
    """Scripted generation backend. Replies are consumed in call order."""

    def __init__(self, responses, cost: float = 0.001) -> None:
        self._responses = list(responses)
        self._cost = cost
        self.prompts: list[str] = []
        self.structured_prompts: list[str] = []
        self.closed = 0

    def _next(self, prompt: str) -> UsageRecord:
        self.prompts.append(prompt)
        if not self._responses:
            raise GenerationError("No more mock responses")
        reply = self._responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return UsageRecord(
            content=reply,
            input_tokens=100,
            output_tokens=50,
            cost=self._cost,
            model_id="mock-model",
            provider_id="Mock",
        )

    def generate(self, prompt: str) -> UsageRecord:
        return self._next(prompt)

    def generate_structured(self, prompt: str) -> UsageRecord:
        self.structured_prompts.append(prompt)
        return self._next(prompt)

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_client():
    return FakeClient
