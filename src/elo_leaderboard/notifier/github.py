"""GitHub pull request comment notifier.

Posts the rating update as a comment on the merged pull request through the
GitHub REST API, with its own timeout and bounded retry policy.
"""

from __future__ import annotations

import logging
import os
import time
from typing import TYPE_CHECKING

import requests

from ..exceptions import ConfigError, NotificationError
from .base import BaseNotifier

if TYPE_CHECKING:
    from ..models import PullRequestEvent, RepositoryContext

logger = logging.getLogger(__name__)

BASE_GITHUB_API_URL = "https://api.github.com"

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 2
RETRYABLE_STATUS_CODES = {500, 502, 503, 504}


def make_headers(token: str) -> dict[str, str]:
    """Build standard GitHub HTTP headers for a token.

    Args:
        token: GitHub token (PAT or Actions GITHUB_TOKEN).

    Returns:
        Mapping of HTTP header names to values.
    """
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }


class GitHubCommentNotifier(BaseNotifier):
    """Posts update messages as pull request comments.

    Example:
        ```python
        repo = RepositoryContext.from_slug("acme/widgets")
        with GitHubCommentNotifier(repo) as notifier:
            notifier.notify(event, body)
        ```
    """

    def __init__(
        self,
        repository: RepositoryContext,
        token: str | None = None,
        api_url: str = BASE_GITHUB_API_URL,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        """Initialize the notifier.

        Args:
            repository: Repository the pull requests belong to.
            token: GitHub token (defaults to the GITHUB_TOKEN env var).
            api_url: REST API base URL, for GitHub Enterprise.
            timeout: Per-request timeout in seconds.
            session: HTTP session to reuse (a new one is created otherwise).

        Raises:
            ConfigError: If no token is available.
        """
        token = token or os.environ.get("GITHUB_TOKEN")
        if not token:
            raise ConfigError(
                "GitHub token not found. Set GITHUB_TOKEN environment variable "
                "or pass token to GitHubCommentNotifier.",
                field="GITHUB_TOKEN",
            )
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(make_headers(token))

    @property
    def name(self) -> str:
        """Return the notifier's name."""
        return "github"

    def comments_url(self, number: int) -> str:
        return f"{self.api_url}/repos/{self.repository.owner}/{self.repository.name}/issues/{number}/comments"

    def notify(self, event: PullRequestEvent, body: str) -> None:
        """Post the message as a comment on the event's pull request.

        Server errors and connection failures are retried; other error
        responses fail immediately.

        Raises:
            NotificationError: If the comment could not be posted.
        """
        url = self.comments_url(event.number)
        last_error: str = "no attempt made"
        status_code: int | None = None

        for attempt in range(MAX_ATTEMPTS):
            try:
                response = self._session.post(url, json={"body": body}, timeout=self.timeout)
            except requests.RequestException as e:
                last_error = str(e)
                status_code = None
                logger.warning(f"Could not post comment on #{event.number} (attempt {attempt + 1}/{MAX_ATTEMPTS}): {e}")
            else:
                if response.status_code in (200, 201):
                    logger.info(f"Posted Elo update comment on #{event.number}")
                    return

                last_error = response.text[:200]
                status_code = response.status_code
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    break
                logger.warning(
                    f"Comment on #{event.number} failed with status {response.status_code} "
                    f"(attempt {attempt + 1}/{MAX_ATTEMPTS})"
                )

            if attempt < MAX_ATTEMPTS - 1:
                time.sleep(RETRY_DELAY_SECONDS)

        raise NotificationError(last_error, status_code=status_code)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
