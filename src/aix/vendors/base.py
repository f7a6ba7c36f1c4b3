"""The descriptor every vendor in the registry implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Literal

import httpx

from aix.config import AixSettings
from aix.types import ModelDescription


class ModelVendor(ABC):
    """Capabilities and display metadata of one vendor."""

    id: ClassVar[str]
    name: ClassVar[str]
    display_rank: ClassVar[int]
    location: ClassVar[Literal["local", "cloud"]]
    instance_limit: ClassVar[int] = 1
    has_server_config_key: ClassVar[str | None] = None

    @abstractmethod
    def get_transport_access(self, partial_setup: Mapping[str, Any] | None = None) -> Any:
        """Turn stored service settings into this vendor's access configuration."""
        raise NotImplementedError

    @abstractmethod
    async def rpc_update_models(
        self,
        access: Any,
        *,
        client: httpx.AsyncClient | None = None,
        settings: AixSettings | None = None,
    ) -> list[ModelDescription]:
        """List the models the configured service offers."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
