# llm.py
# Generation backends behind a single two-method interface.
#
# The agents depend only on GenerationPort. Every backend returns a
# UsageRecord with token counts and a dollar cost; none of them touches the
# CostTracker, which is the caller's job.

import enum
import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from openai import OpenAI, OpenAIError

from coding_agent.config import AppConfig
from coding_agent.errors import ConfigurationError, GenerationError
from coding_agent.models import ModelPricing, UsageRecord

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 120.0


@runtime_checkable
class GenerationPort(Protocol):
    """Send a prompt, get back text plus usage and cost."""

    def generate(self, prompt: str) -> UsageRecord: ...

    def generate_structured(self, prompt: str) -> UsageRecord: ...

    def close(self) -> None: ...


class Provider(str, enum.Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    CLAUDE = "claude"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"

    def __str__(self) -> str:
        return self.value


# Example list prices in dollars per token. Override per client if needed.
OPENAI_PRICING = ModelPricing(name="gpt-4o", input_cost_per_token=5e-6, output_cost_per_token=15e-6)
DEEPSEEK_PRICING = ModelPricing(
    name="deepseek-chat", input_cost_per_token=0.27e-6, output_cost_per_token=1.10e-6
)
CLAUDE_PRICING = ModelPricing(
    name="claude-3-opus-20240229", input_cost_per_token=15e-6, output_cost_per_token=75e-6
)
GEMINI_PRICING = ModelPricing(
    name="gemini-1.5-flash", input_cost_per_token=0.075e-6, output_cost_per_token=0.30e-6
)


# ---------------------------------------------------------------------------
# OpenAI-compatible (OpenAI, DeepSeek)
# ---------------------------------------------------------------------------


class OpenAIClient:
    """Chat-completions backend. DeepSeek speaks the same protocol."""

    def __init__(
        self,
        api_key: str,
        pricing: ModelPricing = OPENAI_PRICING,
        base_url: str | None = None,
        provider_id: str = "OpenAI",
        client: Any = None,
    ) -> None:
        self._pricing = pricing
        self._provider_id = provider_id
        self._client = client or OpenAI(api_key=api_key, base_url=base_url)

    @property
    def model(self) -> str:
        return self._pricing.name

    def close(self) -> None:
        self._client.close()

    def generate(self, prompt: str) -> UsageRecord:
        return self._complete(prompt, temperature=0.2)

    def generate_structured(self, prompt: str) -> UsageRecord:
        return self._complete(
            prompt, temperature=0.0, response_format={"type": "json_object"}
        )

    def _complete(self, prompt: str, **options: Any) -> UsageRecord:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                **options,
            )
        except OpenAIError as exc:
            raise GenerationError(f"{self._provider_id} API error: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise GenerationError(f"No content in {self._provider_id} response") from exc
        if content is None:
            raise GenerationError(f"No content in {self._provider_id} response")

        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) or 0
        output_tokens = getattr(usage, "completion_tokens", 0) or 0
        return UsageRecord(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self._pricing.cost(input_tokens, output_tokens),
            model_id=self.model,
            provider_id=self._provider_id,
        )


# ---------------------------------------------------------------------------
# Plain HTTP backends
# ---------------------------------------------------------------------------


def _post_json(
    http: httpx.Client,
    provider: str,
    url: str,
    payload: dict,
    headers: dict | None = None,
    params: dict | None = None,
) -> dict:
    try:
        response = http.post(url, json=payload, headers=headers, params=params)
    except httpx.HTTPError as exc:
        raise GenerationError(f"{provider} request failed: {exc}") from exc
    if not response.is_success:
        raise GenerationError(
            f"{provider} API error ({response.status_code}): {response.text}"
        )
    try:
        return response.json()
    except ValueError as exc:
        raise GenerationError(f"{provider} returned a non-JSON body") from exc


class ClaudeClient:
    """Anthropic Messages API."""

    URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"
    MAX_TOKENS = 4096

    def __init__(
        self,
        api_key: str,
        pricing: ModelPricing = CLAUDE_PRICING,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._pricing = pricing
        self._http = http_client or httpx.Client(timeout=HTTP_TIMEOUT)

    def close(self) -> None:
        self._http.close()

    def generate(self, prompt: str) -> UsageRecord:
        payload = {
            "model": self._pricing.name,
            "max_tokens": self.MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {"x-api-key": self._api_key, "anthropic-version": self.API_VERSION}
        data = _post_json(self._http, "Claude", self.URL, payload, headers=headers)

        try:
            content = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("No content in Claude response") from exc

        usage = data.get("usage") or {}
        input_tokens = usage.get("input_tokens", 0)
        output_tokens = usage.get("output_tokens", 0)
        return UsageRecord(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self._pricing.cost(input_tokens, output_tokens),
            model_id=self._pricing.name,
            provider_id="Claude",
        )

    def generate_structured(self, prompt: str) -> UsageRecord:
        # No JSON mode on this endpoint; the prompt carries the format.
        return self.generate(prompt)


class GeminiClient:
    """Google generateContent API."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: str,
        pricing: ModelPricing = GEMINI_PRICING,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._pricing = pricing
        self._http = http_client or httpx.Client(timeout=HTTP_TIMEOUT)

    def close(self) -> None:
        self._http.close()

    def generate(self, prompt: str) -> UsageRecord:
        return self._generate(prompt, {})

    def generate_structured(self, prompt: str) -> UsageRecord:
        return self._generate(prompt, {"responseMimeType": "application/json"})

    def _generate(self, prompt: str, generation_config: dict) -> UsageRecord:
        url = f"{self.BASE_URL}/{self._pricing.name}:generateContent"
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        data = _post_json(self._http, "Gemini", url, payload, params={"key": self._api_key})

        try:
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GenerationError("No content in Gemini response") from exc

        usage = data.get("usageMetadata") or {}
        input_tokens = usage.get("promptTokenCount", 0)
        output_tokens = usage.get("candidatesTokenCount", 0)
        return UsageRecord(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self._pricing.cost(input_tokens, output_tokens),
            model_id=self._pricing.name,
            provider_id="Gemini",
        )


class OllamaClient:
    """Local Ollama server. Always free."""

    def __init__(
        self,
        base_url: str,
        model: str,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._http = http_client or httpx.Client(timeout=HTTP_TIMEOUT)

    def close(self) -> None:
        self._http.close()

    def generate(self, prompt: str) -> UsageRecord:
        return self._generate(prompt, structured=False)

    def generate_structured(self, prompt: str) -> UsageRecord:
        return self._generate(prompt, structured=True)

    def _generate(self, prompt: str, structured: bool) -> UsageRecord:
        payload: dict[str, Any] = {"model": self._model, "prompt": prompt, "stream": False}
        if structured:
            payload["format"] = "json"
        data = _post_json(self._http, "Ollama", f"{self._base_url}/api/generate", payload)

        content = data.get("response") if isinstance(data, dict) else None
        if not isinstance(content, str):
            raise GenerationError("No content in Ollama response")
        return UsageRecord(
            content=content,
            input_tokens=data.get("prompt_eval_count", 0),
            output_tokens=data.get("eval_count", 0),
            cost=0.0,
            model_id=self._model,
            provider_id="Ollama",
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _require(key: str | None, name: str) -> str:
    if not key:
        raise ConfigurationError(f"API key for {name} is not set in the environment variables")
    return key


def create_client(provider: Provider | str, config: AppConfig) -> GenerationPort:
    """Build the backend for `provider` from the loaded configuration."""
    try:
        provider = Provider(provider)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown provider: {provider!r}") from exc

    logger.debug("Creating generation client for provider %s", provider)

    if provider is Provider.OPENAI:
        return OpenAIClient(_require(config.openai_api_key, "OpenAI"))
    if provider is Provider.DEEPSEEK:
        return OpenAIClient(
            _require(config.deepseek_api_key, "DeepSeek"),
            pricing=DEEPSEEK_PRICING,
            base_url="https://api.deepseek.com",
            provider_id="DeepSeek",
        )
    if provider is Provider.CLAUDE:
        return ClaudeClient(_require(config.anthropic_api_key, "Anthropic Claude"))
    if provider is Provider.GEMINI:
        return GeminiClient(_require(config.google_api_key, "Google Gemini"))
    return OllamaClient(config.ollama_base_url, config.ollama_model)
