"""
GitHub API endpoints.

Server-side proxy for repository tarballs (codeload.github.com does not
allow cross-origin downloads from the browser).
"""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from hirehiker.services.github import (
    GitHubError,
    RateLimitExceeded,
    RepositoryNotFound,
    fetch_github_tarball_base64,
)

logger = logging.getLogger("github_api")

router = APIRouter()


class TarballResponse(BaseModel):
    """Base64 tarball; binary cannot travel in a JSON body."""

    owner: str
    repo: str
    tarball_base64: str


def raise_for_github_error(error: GitHubError) -> None:
    """Translate a GitHub service error into an HTTP error."""
    if isinstance(error, RepositoryNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, RateLimitExceeded):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(error))
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


@router.get("/tarball", response_model=TarballResponse)
def get_tarball(
    owner: str = Query(..., min_length=1),
    repo: str = Query(..., min_length=1),
):
    """Download a repository tarball and return it base64-encoded."""
    try:
        encoded = fetch_github_tarball_base64(owner, repo)
    except GitHubError as e:
        logger.error(f"Tarball download failed for {owner}/{repo}: {e}")
        raise_for_github_error(e)

    return TarballResponse(owner=owner, repo=repo, tarball_base64=encoded)
