# models.py
# Data contracts for the coding agent.
# No business logic lives here: pure schema and validation.

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """One labelled event in the run history. Never edited after append."""

    model_config = ConfigDict(frozen=True)

    label: str
    content: str


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def parameters(self) -> dict:
        """Variant fields as they appear under "parameters" on the wire."""
        return self.model_dump(exclude={"tool_name"})


class ReadFile(_ActionBase):
    tool_name: Literal["ReadFile"] = "ReadFile"
    path: str = Field(..., description="File to read as text.")


class WriteFile(_ActionBase):
    tool_name: Literal["WriteFile"] = "WriteFile"
    path: str = Field(..., description="File to create or replace.")
    content: str = Field(..., description="Full new content of the file.")


class RunCommand(_ActionBase):
    tool_name: Literal["RunCommand"] = "RunCommand"
    command: str = Field(..., description="Shell command line.")


class Search(_ActionBase):
    tool_name: Literal["Search"] = "Search"
    query: str = Field(..., description="Web search query.")


class ListFiles(_ActionBase):
    tool_name: Literal["ListFiles"] = "ListFiles"
    path: str = Field(..., description="Root directory to enumerate.")


class CodeGeneration(_ActionBase):
    tool_name: Literal["CodeGeneration"] = "CodeGeneration"
    task: str = Field(..., description="Instruction for the code generator.")


Action = Annotated[
    Union[ReadFile, WriteFile, RunCommand, Search, ListFiles, CodeGeneration],
    Field(discriminator="tool_name"),
]

TOOL_NAMES: tuple[str, ...] = (
    "ReadFile",
    "WriteFile",
    "RunCommand",
    "Search",
    "ListFiles",
    "CodeGeneration",
)


class Decision(BaseModel):
    """The resolved thought and action for a single plan step."""

    model_config = ConfigDict(frozen=True)

    thought: str = Field(..., description="Model reasoning for the chosen tool.")
    action: Action
    file_path: str | None = Field(
        default=None,
        description="Where to save generated code. Only used with CodeGeneration.",
    )


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class UsageRecord(BaseModel):
    """Normalized result of any generation call."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    model_id: str
    provider_id: str


class ModelPricing(BaseModel):
    """Per-token prices for one backend model, in dollars."""

    model_config = ConfigDict(frozen=True)

    name: str
    input_cost_per_token: float = 0.0
    output_cost_per_token: float = 0.0

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens * self.input_cost_per_token
            + output_tokens * self.output_cost_per_token
        )
