"""Exception hierarchy shared across the decision engine."""


class AIPlayerError(Exception):
    """Base class for engine errors."""


class ConfigurationError(AIPlayerError):
    """Raised at startup when required settings (e.g. the API key) are missing."""


class ToolValidationError(AIPlayerError):
    """Raised when an oracle tool call cannot be turned into a typed request."""

    reason = "invalid tool call"

    def __init__(self, tool_name: str, detail: str | None = None) -> None:
        self.tool_name = tool_name
        self.detail = detail
        super().__init__(f"{self.reason}: {tool_name}" + (f" ({detail})" if detail else ""))


class UnknownToolError(ToolValidationError):
    reason = "unknown tool"


class ToolArgumentsError(ToolValidationError):
    reason = "bad arguments"


class OracleError(AIPlayerError):
    """Base class for oracle transport and protocol failures."""


class OracleTransportError(OracleError):
    """Timeout, connection failure or non-success HTTP status."""


class OracleProtocolError(OracleError):
    """Response body is not the documented chat-completions shape."""
