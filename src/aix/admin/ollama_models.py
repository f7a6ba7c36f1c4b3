"""Catalogue of well known Ollama-protocol base models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BaseModelInfo:
    description: str
    pulls: int = 0
    tags: tuple[str, ...] = field(default_factory=tuple)
    # YYYYMMDD of the catalogue update that added the model
    added: str | None = None
    context_window: int | None = None
    has_tools: bool = False
    has_vision: bool = False
    is_embeddings: bool = False


OLLAMA_PREV_UPDATE = "20240815"

OLLAMA_BASE_MODELS: dict[str, BaseModelInfo] = {
    "llama3.2": BaseModelInfo(
        description="Meta's Llama 3.2 goes small with 1B and 3B models.",
        pulls=5_300_000,
        tags=("1b", "3b"),
        added="20240925",
        context_window=131_072,
        has_tools=True,
    ),
    "llama3.1": BaseModelInfo(
        description="Llama 3.1 is a state-of-the-art model from Meta available in 8B, 70B and 405B parameter sizes.",
        pulls=8_900_000,
        tags=("8b", "70b", "405b"),
        added="20240723",
        context_window=131_072,
        has_tools=True,
    ),
    "llama3.2-vision": BaseModelInfo(
        description="Llama 3.2 Vision is a collection of instruction-tuned image reasoning generative models.",
        pulls=400_000,
        tags=("11b", "90b"),
        added="20241106",
        context_window=131_072,
        has_vision=True,
    ),
    "qwen2.5": BaseModelInfo(
        description="Qwen2.5 models are pretrained on Alibaba's latest large-scale dataset.",
        pulls=2_900_000,
        tags=("0.5b", "1.5b", "3b", "7b", "14b", "32b", "72b"),
        added="20240919",
        context_window=32_768,
        has_tools=True,
    ),
    "mistral": BaseModelInfo(
        description="The 7B model released by Mistral AI, updated to version 0.3.",
        pulls=4_100_000,
        tags=("7b",),
        context_window=32_768,
        has_tools=True,
    ),
    "gemma2": BaseModelInfo(
        description="Google Gemma 2 is a high-performing and efficient model available in three sizes.",
        pulls=1_900_000,
        tags=("2b", "9b", "27b"),
        added="20240627",
        context_window=8192,
    ),
    "llava": BaseModelInfo(
        description="LLaVA is a multimodal model combining a vision encoder and Vicuna for visual and language understanding.",
        pulls=2_000_000,
        tags=("7b", "13b", "34b"),
        context_window=4096,
        has_vision=True,
    ),
    "nomic-embed-text": BaseModelInfo(
        description="A high-performing open embedding model with a large token context window.",
        pulls=2_400_000,
        is_embeddings=True,
    ),
}
