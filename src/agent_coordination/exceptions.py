"""Custom exception hierarchy for the agent coordination core.

This module defines all custom exceptions used throughout the system,
organized into logical categories: client errors (text generator backends),
coordination errors (routing and task execution) and system errors.
"""


class AgentError(Exception):
    """Base exception for all agent coordination errors."""


# =============================================================================
# Client Errors - Issues with text generator backends
# =============================================================================

class ClientError(AgentError):
    """Base class for text generator client errors."""


class AuthenticationError(ClientError):
    """API key is invalid or missing."""


class RateLimitError(ClientError):
    """Rate limit exceeded."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None):
        self.retry_after = retry_after
        if retry_after:
            message = f"{message}. Retry after: {retry_after}s"
        super().__init__(message)


class ProviderUnavailableError(ClientError):
    """Provider API is temporarily unavailable."""


class InvalidResponseError(ClientError):
    """Response from provider could not be parsed."""


# =============================================================================
# Coordination Errors - Issues with routing and task execution
# =============================================================================

class ValidationError(AgentError):
    """Task parameters are missing or malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NotConnectedError(AgentError):
    """Message target is not in the sender's connection set."""

    def __init__(self, sender_id: str, target_id: str):
        self.sender_id = sender_id
        self.target_id = target_id
        super().__init__(f"Agent '{sender_id}' is not connected to '{target_id}'")


class NoAgentAvailableError(AgentError):
    """No connected agent offers the required capability."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"No agent available with capability '{capability}'")


class UnknownTaskTypeError(AgentError):
    """Agent received a task type it does not handle."""

    def __init__(self, task_type: str):
        self.task_type = task_type
        super().__init__(f"unknown task type {task_type}")


class UpstreamGenerationError(AgentError):
    """The text generator failed or a delegated task did not succeed."""


# =============================================================================
# System Errors - Composition root and side effects
# =============================================================================

class PersistenceError(AgentError):
    """A storage side effect failed."""

    def __init__(self, operation: str, cause: Exception | str):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage operation '{operation}' failed: {cause}")


class SystemNotInitializedError(AgentError):
    """The multi-agent system was used before initialize() succeeded."""

    def __init__(self, message: str = "Multi-agent system is not initialized"):
        super().__init__(message)
