"""
GitHub Tarball Service.

Downloads repository tarballs so problems can point at a real GitHub
project instead of embedding their files.
"""

import base64
from typing import Optional

import httpx

from hirehiker.core.config import settings
from hirehiker.core.log import get_service_logger

logger = get_service_logger("github", "GITHUB")

REQUEST_TIMEOUT_SECONDS = 60.0


class GitHubError(Exception):
    """Base error for GitHub API failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFound(GitHubError):
    pass


class RateLimitExceeded(GitHubError):
    pass


def _build_headers() -> dict[str, str]:
    headers = {"Accept": "application/vnd.github+json"}
    if settings.GITHUB_TOKEN:
        headers["Authorization"] = f"Bearer {settings.GITHUB_TOKEN}"
    return headers


def fetch_github_tarball(
    owner: str,
    repo: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> bytes:
    """
    Download the default-branch tarball of owner/repo.

    Args:
        owner: Repository owner or organisation
        repo: Repository name
        transport: Optional httpx transport (used by tests)

    Returns:
        The gzipped tar archive bytes

    Raises:
        RateLimitExceeded: 403 with x-ratelimit-remaining of 0
        RepositoryNotFound: 404
        GitHubError: any other non-success status or network failure
    """
    url = f"{settings.GITHUB_API_URL.rstrip('/')}/repos/{owner}/{repo}/tarball"
    logger.info(f"Downloading tarball for {owner}/{repo}")

    try:
        with httpx.Client(
            headers=_build_headers(),
            follow_redirects=True,
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        ) as client:
            response = client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Tarball request failed: {e}")
        raise GitHubError(f"GitHub request failed: {e}") from e

    if response.is_success:
        logger.info(f"Downloaded {len(response.content)} bytes for {owner}/{repo}")
        return response.content

    if response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
        raise RateLimitExceeded(
            "GitHub API rate limit exceeded. Set GITHUB_TOKEN env var to increase limit.",
            status_code=403,
        )
    if response.status_code == 404:
        raise RepositoryNotFound(f"Repository not found: {owner}/{repo}", status_code=404)

    raise GitHubError(f"GitHub API error: {response.status_code}", status_code=response.status_code)


def fetch_github_tarball_base64(
    owner: str,
    repo: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """Same as fetch_github_tarball, encoded for JSON transport."""
    return base64.b64encode(fetch_github_tarball(owner, repo, transport=transport)).decode("ascii")
