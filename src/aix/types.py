"""Vendor-neutral request, model and particle models."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ToolMode = Literal["off", "auto", "required"]
Role = Literal["system", "user", "assistant", "tool"]
StopReason = Literal["ok", "max_tokens", "tool_calls", "filtered"]
ParticleType = Literal["text", "tool_call_delta", "tool_call", "usage", "error", "end"]


class TextPart(BaseModel):
    """Plain text content."""

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """Image reference, either an http(s) URL or a base64 ``data:`` URL."""

    type: Literal["image"] = "image"
    url: str
    detail: Literal["auto", "low", "high"] | None = None


class ToolCallPart(BaseModel):
    """A tool invocation previously produced by the assistant."""

    type: Literal["tool_call"] = "tool_call"
    id: str
    name: str
    arguments: str = "{}"


class ToolResultPart(BaseModel):
    """The result of running a tool, answering a ``ToolCallPart`` by id."""

    type: Literal["tool_result"] = "tool_result"
    id: str
    content: str
    is_error: bool = False


ContentPart = Annotated[
    TextPart | ImagePart | ToolCallPart | ToolResultPart,
    Field(discriminator="type"),
]


class ChatMessage(BaseModel):
    """Single conversation turn."""

    role: Role
    parts: list[ContentPart]

    @field_validator("parts", mode="before")
    @classmethod
    def _text_shorthand(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [{"type": "text", "text": value}]
        return value

    def text(self) -> str:
        """Concatenate the text parts of this turn."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))


class ToolDef(BaseModel):
    """Simple JSON-schema tool definition."""

    name: str
    description: str | None = None
    json_schema: dict[str, Any] = Field(default_factory=dict)


class ChatGenerateRequest(BaseModel):
    """Normalized chat generation request shared by all dialects."""

    messages: list[ChatMessage]
    tools: list[ToolDef] = Field(default_factory=list)
    tool_mode: ToolMode = "off"
    temperature: float | None = None
    max_tokens: int | None = None


class AixModel(BaseModel):
    """Model identifier plus the capabilities the adapters check against."""

    model_config = ConfigDict(frozen=True)

    id: str
    supports_tools: bool = False
    supports_vision: bool = False
    # OpenAI family only: generate through /v1/responses instead of chat completions
    vnd_oai_responses_api: bool = False
    context_window: int | None = None
    max_completion_tokens: int | None = None


class ToolCall(BaseModel):
    """A tool call, complete or (inside a delta particle) partial."""

    id: str
    name: str
    arguments: str = ""


class Usage(BaseModel):
    """Token counts as reported by the vendor."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


class Particle(BaseModel):
    """Normalized unit of generation output emitted by the parsers."""

    type: ParticleType
    text: str | None = None
    tool_call: ToolCall | None = None
    usage: Usage | None = None
    error: str | None = None
    stop_reason: StopReason | None = None

    @property
    def is_terminal(self) -> bool:
        return self.type in ("error", "end")


# interface tags carried by listed models
LLM_IF_OAI_CHAT = "oai-chat"
LLM_IF_OAI_FN = "oai-fn"
LLM_IF_OAI_VISION = "oai-vision"
LLM_IF_OAI_RESPONSES = "oai-responses"


class ModelDescription(BaseModel):
    """A model as listed by a vendor, before the user picks it."""

    id: str
    label: str
    created: int | None = None
    updated: int | None = None
    description: str = ""
    context_window: int | None = None
    max_completion_tokens: int | None = None
    interfaces: list[str] = Field(default_factory=list)

    def to_aix_model(self) -> AixModel:
        return AixModel(
            id=self.id,
            supports_tools=LLM_IF_OAI_FN in self.interfaces,
            supports_vision=LLM_IF_OAI_VISION in self.interfaces,
            vnd_oai_responses_api=LLM_IF_OAI_RESPONSES in self.interfaces,
            context_window=self.context_window,
            max_completion_tokens=self.max_completion_tokens,
        )
