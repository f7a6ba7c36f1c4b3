"""Package specific exception hierarchy."""


class AixError(Exception):
    """Base exception for the aix package."""


class ConfigurationError(AixError):
    """Raised when access configuration cannot be turned into a request."""


class UnsupportedDialectError(ConfigurationError):
    """Raised when no dispatch exists for a dialect tag."""

    def __init__(self, dialect: str) -> None:
        super().__init__(f"Dialect '{dialect}' is not supported.")
        self.dialect = dialect


class UnsupportedFeatureError(AixError):
    """Raised when a requested feature is unsupported by a model or vendor."""

    def __init__(self, feature: str, model: str | None = None) -> None:
        suffix = f" by model '{model}'" if model else ""
        super().__init__(f"Feature '{feature}' is not supported{suffix}.")
        self.feature = feature


class ToolNotAvailableError(AixError):
    """Raised when a model cannot be given the requested tools."""

    def __init__(self, model: str, tools: list[str]) -> None:
        joined = ", ".join(sorted(set(tools)))
        super().__init__(f"{model}: tool(s) not available: {joined}")
        self.tools = tools


class ProviderError(AixError):
    """Represents vendor HTTP, transport or generation errors."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        suffix = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {message}{suffix}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


class FrameParseError(AixError):
    """Raised when a demuxed frame does not hold the expected JSON document."""

    def __init__(self, data: str, reason: str) -> None:
        preview = data if len(data) <= 120 else data[:117] + "..."
        super().__init__(f"malformed frame ({reason}): {preview}")
        self.data = data
