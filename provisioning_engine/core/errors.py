# provisioning_engine/core/errors.py

from typing import Dict, Optional

# -----------------------------
# Base Errors
# -----------------------------

class PanelError(Exception):
    """Base class for all provisioning engine errors."""
    pass


# -----------------------------
# Input Errors
# -----------------------------

class PreconditionError(PanelError):
    """Required input missing or referencing something that does not exist."""
    pass


class ValidationError(PanelError):
    """A supplied variable value violates its rule expression."""

    def __init__(
        self,
        field: str,
        message: str,
        errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.message = message
        self.errors = errors or {field: message}


class InvalidArgument(PanelError, ValueError):
    """Malformed value object input (ip / port)."""
    pass


class UnsupportedRuleError(PanelError, ValueError):
    """Rule expression names a rule the interpreter does not know."""
    pass


# -----------------------------
# Persistence Errors
# -----------------------------

class PersistenceError(PanelError):
    pass


class ServerNotFound(PersistenceError):
    pass


class EggAlreadyExists(PersistenceError):
    pass


# -----------------------------
# Daemon Errors
# -----------------------------

class AgentConnectionError(PanelError):
    """Daemon unreachable or it rejected the request."""

    def __init__(
        self,
        message: str,
        node_id: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.node_id = node_id
        self.status_code = status_code
