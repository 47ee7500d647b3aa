"""Query transports for the GitHub GraphQL API.

Two interchangeable transports execute a GraphQL document and return the
parsed JSON envelope:

- :class:`GhCliTransport` shells out to ``gh api graphql`` and relies on the
  credentials the GitHub CLI already holds.
- :class:`HttpTransport` posts directly to the GraphQL endpoint with a token.

Both enforce an explicit deadline and map failures onto the
:mod:`prwatch.github.exceptions` taxonomy. Neither inspects the envelope; that
is the decoder's job.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
from typing import Any, Protocol

import httpx

from prwatch.github.exceptions import (
    LaunchError,
    MalformedResponseError,
    NotAuthenticatedError,
    TransportTimeoutError,
    TransportUnavailableError,
    UpstreamError,
)
from prwatch.logging import sanitize_for_log, truncate_output

logger = logging.getLogger("prwatch.github.transport")

KNOWN_GH_PATHS = (
    "/opt/homebrew/bin/gh",
    "/usr/local/bin/gh",
    "/usr/bin/gh",
)
DEFAULT_TIMEOUT = 30.0
TERMINATION_GRACE_PERIOD = 2.0
GRAPHQL_URL = "https://api.github.com/graphql"

# gh exits with 4 when authentication is required
_GH_EXIT_AUTH_REQUIRED = 4


class Transport(Protocol):
    """Interface shared by the query transports."""

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """Run a GraphQL document and return the parsed JSON envelope."""
        ...

    def close(self) -> None:
        """Release any held resources."""
        ...


def resolve_gh_path(explicit: str | None = None) -> str:
    """Locate the gh binary.

    Checks an explicit path (or PRWATCH_GH_PATH), then known install
    locations, then PATH. Falls back to plain ``gh`` so the failure surfaces
    at launch time as TransportUnavailableError.
    """
    explicit = explicit or os.environ.get("PRWATCH_GH_PATH")
    if explicit:
        return explicit
    for candidate in KNOWN_GH_PATHS:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
    return shutil.which("gh") or "gh"


def get_github_token() -> str:
    """Get a GitHub token from the environment or the gh CLI."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token
    try:
        result = subprocess.run(
            [resolve_gh_path(), "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
            timeout=DEFAULT_TIMEOUT,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
        return ""


class GhCliTransport:
    """Executes GraphQL queries through ``gh api graphql``."""

    def __init__(
        self,
        gh_path: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        grace_period: float = TERMINATION_GRACE_PERIOD,
    ) -> None:
        """Initialize the gh transport.

        Args:
            gh_path: Path to the gh binary. Resolved automatically when None.
            timeout: Seconds before a gh process is terminated.
            grace_period: Seconds to wait after terminate() before kill().
        """
        self.gh_path = resolve_gh_path(gh_path)
        self.timeout = timeout
        self.grace_period = grace_period

    def close(self) -> None:
        """Nothing to release; each query is its own process."""

    @staticmethod
    def build_args(query: str, variables: dict[str, Any] | None = None) -> list[str]:
        """Build gh arguments. Strings use ``-f``; numbers and booleans use ``-F``."""
        args = ["api", "graphql", "-f", f"query={query}"]
        for key, value in (variables or {}).items():
            if value is None:
                continue
            if isinstance(value, bool):
                args += ["-F", f"{key}={str(value).lower()}"]
            elif isinstance(value, int):
                args += ["-F", f"{key}={value}"]
            else:
                args += ["-f", f"{key}={value}"]
        return args

    def _run(self, args: list[str]) -> tuple[str, str, int]:
        """Run gh with a deadline, draining stdout and stderr concurrently.

        Returns:
            (stdout, stderr, returncode)

        Raises:
            TransportUnavailableError: If the binary does not exist.
            LaunchError: If the process could not be started.
            TransportTimeoutError: If the deadline expired.
        """
        try:
            process = subprocess.Popen(
                [self.gh_path, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise TransportUnavailableError(
                f"GitHub CLI (gh) not found at '{self.gh_path}'"
            ) from e
        except OSError as e:
            raise LaunchError(f"Failed to launch GitHub CLI: {e}") from e

        try:
            # communicate() reads both pipes while waiting, so a large
            # response cannot fill a pipe buffer and block the child.
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            logger.error("gh timed out after %ss, terminating", self.timeout)
            process.terminate()
            try:
                process.communicate(timeout=self.grace_period)
            except subprocess.TimeoutExpired:
                process.kill()
                process.communicate()
            raise TransportTimeoutError(self.timeout) from None

        return stdout, stderr, process.returncode

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """Execute a GraphQL query through gh.

        gh exits non-zero when the envelope carries errors but still prints
        the envelope, so stdout is parsed first and the exit code only
        matters when it is not JSON.
        """
        stdout, stderr, returncode = self._run(self.build_args(query, variables))

        try:
            return json.loads(stdout)
        except json.JSONDecodeError:
            pass

        if returncode == _GH_EXIT_AUTH_REQUIRED:
            raise NotAuthenticatedError("Not logged in to GitHub CLI - run: gh auth login")
        if returncode != 0:
            message = (stderr or stdout).strip()
            logger.error(
                "gh exited with %d: %s", returncode, truncate_output(sanitize_for_log(message), 500)
            )
            raise UpstreamError([message] if message else [])

        logger.debug("Unparseable gh output: %s", truncate_output(stdout, 500))
        raise MalformedResponseError("Invalid JSON from GitHub CLI")


class HttpTransport:
    """Executes GraphQL queries over HTTPS with a bearer token."""

    def __init__(
        self,
        token: str,
        base_url: str = GRAPHQL_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the HTTP transport.

        Args:
            token: GitHub token with repo read scope.
            base_url: GraphQL endpoint (for testing/enterprise).
            timeout: Per-request deadline in seconds.
        """
        self.token = token
        self.base_url = base_url
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> Any:
        """POST a GraphQL query and return the parsed envelope."""
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = {k: v for k, v in variables.items() if v is not None}

        try:
            response = self.client.post(self.base_url, json=payload)
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(self.timeout) from e
        except httpx.TransportError as e:
            raise TransportUnavailableError(f"GitHub API unreachable: {e}") from e

        if response.status_code == 401:
            raise NotAuthenticatedError("GitHub token rejected (401)")

        failure = f"GraphQL request failed: {response.status_code} - {response.text}"
        try:
            body = response.json()
        except ValueError as e:
            if response.status_code != 200:
                raise UpstreamError([failure]) from e
            raise MalformedResponseError("Invalid JSON from GitHub API") from e

        is_envelope = isinstance(body, dict) and ("data" in body or "errors" in body)
        if response.status_code != 200 and not is_envelope:
            raise UpstreamError([failure])
        return body
