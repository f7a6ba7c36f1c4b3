"""Administration of Ollama-protocol hosts (Ollama and the Egregore runner).

Generation goes through the OpenAI-compatible endpoint of these hosts; model
listing, pulling and deleting still use their private ``/api/*`` protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import datetime

import httpx
from pydantic import BaseModel, Field

from aix.access import EgregoreAccess, OllamaAccess, TransportAccess, egregore_access, ollama_access
from aix.admin.ollama_models import OLLAMA_BASE_MODELS, OLLAMA_PREV_UPDATE, BaseModelInfo
from aix.config import AixSettings, get_settings
from aix.demuxers import JsonNLDemuxer
from aix.errors import ProviderError
from aix.fetchers import borrowed_client, fetch_json_or_raise, fetch_text_or_raise
from aix.types import LLM_IF_OAI_CHAT, LLM_IF_OAI_FN, LLM_IF_OAI_VISION, ModelDescription

_PATH_TAGS = "/api/tags"
_PATH_SHOW = "/api/show"
_PATH_PULL = "/api/pull"
_PATH_DELETE = "/api/delete"

_DEFAULT_CONTEXT_WINDOW = 8192
_FRACTION = re.compile(r"(\.\d{6})\d+")

_logger = logging.getLogger(__name__)


class WireModelDetails(BaseModel):
    format: str | None = None
    family: str | None = None
    parameter_size: str | None = None
    quantization_level: str | None = None


class WireModel(BaseModel):
    name: str
    modified_at: str = ""
    size: int = 0
    digest: str = ""
    details: WireModelDetails | None = None


class WireModelInfo(BaseModel):
    license: str | None = None
    modelfile: str | None = None
    parameters: str | None = None
    template: str | None = None
    details: WireModelDetails | None = None


class PullableModel(BaseModel):
    id: str
    label: str
    tag: str
    tags: list[str] = Field(default_factory=list)
    description: str
    pulls: int
    is_new: bool


class PullResult(BaseModel):
    status: str
    error: str | None = None


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _epoch(value: str) -> int | None:
    # Go timestamps carry nanoseconds, more than fromisoformat accepts
    try:
        return int(datetime.fromisoformat(_FRACTION.sub(r"\1", value).replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


def _num_ctx(parameters: str | None) -> int | None:
    for line in (parameters or "").splitlines():
        if line.startswith("num_ctx "):
            fields = line.split()
            if len(fields) > 1 and fields[1].isdigit():
                return int(fields[1])
    return None


def describe_model(model: WireModel, info: WireModelInfo) -> ModelDescription:
    """Turn the tags and show replies for one model into a ``ModelDescription``."""
    # names look like "name:tag", the tag defaulting to "latest"
    model_name, _, model_tag = model.name.partition(":")
    label = _capitalize(model_name) + (f" ({model_tag})" if model_tag and model_tag != "latest" else "")

    base = OLLAMA_BASE_MODELS.get(model_name, BaseModelInfo(description=""))
    description = base.description or "Model unknown"

    details = info.details or model.details
    if details and (details.quantization_level or details.format or details.parameter_size):
        first_line = f"{details.parameter_size} parameters " if details.parameter_size else ""
        if details.quantization_level:
            first_line += f"({details.quantization_level}" + (f", {details.format})" if details.format else ")")
        if model.size:
            first_line += f", {model.size / 1024 / 1024 / 1024:.1f} GB"
        if base.has_tools:
            first_line += " [tools]"
        if base.has_vision:
            first_line += " [vision]"
        description = first_line + "\n\n" + description

    context_window = _num_ctx(info.parameters) or base.context_window or _DEFAULT_CONTEXT_WINDOW

    interfaces = [] if base.is_embeddings else [LLM_IF_OAI_CHAT]
    if base.has_tools:
        interfaces.append(LLM_IF_OAI_FN)
    if base.has_vision or "-vision" in model_name:
        interfaces.append(LLM_IF_OAI_VISION)

    modified = _epoch(model.modified_at)
    return ModelDescription(
        id=model.name,
        label=label,
        created=modified,
        updated=modified,
        description=description,
        context_window=context_window,
        max_completion_tokens=round(context_window / 2),
        interfaces=interfaces,
    )


class OllamaAdmin:
    """List, inspect, pull and delete models on an Ollama-protocol host."""

    def __init__(
        self,
        access: OllamaAccess | EgregoreAccess,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> None:
        self._access = access
        self._client = client
        self._settings = settings or get_settings()

    @property
    def name(self) -> str:
        return "Egregore" if isinstance(self._access, EgregoreAccess) else "Ollama"

    def _transport(self, api_path: str) -> TransportAccess:
        if isinstance(self._access, EgregoreAccess):
            return egregore_access(self._access, api_path, self._settings)
        return ollama_access(self._access, api_path, self._settings)

    async def list_models(self) -> list[ModelDescription]:
        """Installed models, each enriched with its ``/api/show`` details."""
        async with borrowed_client(self._client, self._settings.aix_http_timeout_s) as http:
            tags = self._transport(_PATH_TAGS)
            data = await fetch_json_or_raise(http, name=self.name, url=tags.url, headers=tags.headers)
            models = [WireModel.model_validate(m) for m in data.get("models") or []]
            infos = await asyncio.gather(*(self._show(http, m.name) for m in models))
        return [describe_model(model, info) for model, info in zip(models, infos)]

    async def show(self, name: str) -> WireModelInfo:
        async with borrowed_client(self._client, self._settings.aix_http_timeout_s) as http:
            return await self._show(http, name)

    async def _show(self, http: httpx.AsyncClient, name: str) -> WireModelInfo:
        show = self._transport(_PATH_SHOW)
        data = await fetch_json_or_raise(
            http, name=self.name, url=show.url, headers=show.headers, method="POST", body={"name": name}
        )
        return WireModelInfo.model_validate(data)

    def list_pullable(self) -> list[PullableModel]:
        """Models from the built-in catalogue that can be pulled."""
        return [
            PullableModel(
                id=model_id,
                label=_capitalize(model_id),
                tag="latest",
                tags=list(model.tags),
                description=model.description,
                pulls=model.pulls,
                is_new=bool(model.added) and model.added > OLLAMA_PREV_UPDATE,
            )
            for model_id, model in OLLAMA_BASE_MODELS.items()
        ]

    async def pull(self, name: str) -> PullResult:
        """Pull a model; the reply is one JSON status object per line."""
        pull = self._transport(_PATH_PULL)
        async with borrowed_client(self._client, self._settings.aix_http_timeout_s) as http:
            text = await fetch_text_or_raise(
                http, name=f"{self.name}::pull", url=pull.url, headers=pull.headers, method="POST", body={"name": name}
            )

        demuxer = JsonNLDemuxer()
        frames = demuxer.feed(text) + demuxer.flush()

        last_status = "unknown"
        last_error: str | None = None
        for frame in frames:
            try:
                message = json.loads(frame.data)
            except json.JSONDecodeError as exc:
                raise ProviderError(f"{self.name}::pull", f"invalid status line: {frame.data}") from exc
            if message.get("status"):
                last_status = f"{name}: {message['status']}"
            if message.get("error"):
                last_error = message["error"]

        _logger.debug("%s pull of %s ended with %s", self.name, name, last_status)
        return PullResult(status=last_status, error=last_error)

    async def delete(self, name: str) -> None:
        delete = self._transport(_PATH_DELETE)
        async with borrowed_client(self._client, self._settings.aix_http_timeout_s) as http:
            output = await fetch_text_or_raise(
                http,
                name=f"{self.name}::delete",
                url=delete.url,
                headers=delete.headers,
                method="DELETE",
                body={"name": name},
            )
        if output and output != "null":
            raise ProviderError(f"{self.name}::delete", f"delete issue: {output}")
