"""Custom exceptions for GitHub access."""


class GitHubError(Exception):
    """Base exception for GitHub access errors."""


class TransportUnavailableError(GitHubError):
    """The query mechanism cannot be invoked at all (gh missing, host unreachable)."""


class LaunchError(GitHubError):
    """The query process was attempted but failed to start."""


class TransportTimeoutError(GitHubError):
    """The query started but exceeded its deadline and was terminated."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"GitHub query timed out after {timeout:g}s")
        self.timeout = timeout


class MalformedResponseError(GitHubError):
    """The output could not be parsed as the expected response envelope."""


class UpstreamError(GitHubError):
    """The response envelope carried an ``errors`` list."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages) if messages else "GitHub API error")
        self.messages = messages


class NotAuthenticatedError(GitHubError):
    """The authenticated viewer could not be resolved."""


class RecordDecodeError(GitHubError):
    """A single PR record lacked a required field."""

    def __init__(self, field: str, detail: str = "missing") -> None:
        super().__init__(f"PR record field '{field}' {detail}")
        self.field = field
