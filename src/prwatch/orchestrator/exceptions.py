"""Exceptions for the Orchestrator module."""


class OrchestratorError(Exception):
    """Base exception for orchestrator errors."""

    pass


class UserNotResolvedError(OrchestratorError):
    """The authenticated GitHub user could not be determined."""

    pass
