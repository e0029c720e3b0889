"""
Workspace API endpoints.

Read and edit the project files of a session. The candidate editor applies
assistant code blocks through PUT /file, and the assistant's read_file tool
reads the same workspace.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hirehiker.api.v1.github import raise_for_github_error
from hirehiker.api.v1.messages import get_session_workspace
from hirehiker.api.v1.sessions import get_session_or_404
from hirehiker.db.session import get_db
from hirehiker.models import SessionStatus
from hirehiker.services.github import GitHubError, fetch_github_tarball
from hirehiker.services.workspace import (
    WorkspaceError,
    extract_tarball,
    get_language_from_path,
    normalize_path,
    parse_github_url,
    tar_files_to_tree,
)

logger = logging.getLogger("workspace_api")

router = APIRouter()


# ============== Pydantic Schemas ==============


class FileContent(BaseModel):
    path: str
    language: str
    content: str


class WriteFileRequest(BaseModel):
    """Schema for writing a file (e.g. applying an assistant code block)."""

    path: str = Field(min_length=1)
    content: str


class LoadRepositoryRequest(BaseModel):
    repo_url: str = Field(min_length=1)  # https://github.com/owner/repo


class LoadRepositoryResponse(BaseModel):
    owner: str
    repo: str
    files_mounted: int
    file_tree: list[str]


# ============== API Endpoints ==============


@router.get("/{session_id}/workspace/files", response_model=list[str])
async def list_workspace_files(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Sorted file paths, without node_modules, .git and build output."""
    session = get_session_or_404(db, session_id)
    return get_session_workspace(session).get_file_tree()


@router.get("/{session_id}/workspace/tree")
async def get_workspace_tree(session_id: uuid.UUID, db: Session = Depends(get_db)):
    """Nested FileSystemTree, ready to mount in the browser editor."""
    session = get_session_or_404(db, session_id)
    return get_session_workspace(session).to_tree()


@router.get("/{session_id}/workspace/file", response_model=FileContent)
async def read_workspace_file(
    session_id: uuid.UUID,
    path: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    """Read a single file of the session workspace."""
    session = get_session_or_404(db, session_id)

    try:
        path = normalize_path(path)
    except WorkspaceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    content = get_session_workspace(session).read_file(path)

    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File not found: {path}",
        )

    return FileContent(path=path, language=get_language_from_path(path), content=content)


@router.put("/{session_id}/workspace/file", response_model=FileContent)
async def write_workspace_file(
    session_id: uuid.UUID,
    file_data: WriteFileRequest,
    db: Session = Depends(get_db),
):
    """Create or overwrite a file. Completed sessions are read-only."""
    session = get_session_or_404(db, session_id)

    if session.status == SessionStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session already completed",
        )

    try:
        path = get_session_workspace(session).write_file(file_data.path, file_data.content)
    except WorkspaceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return FileContent(path=path, language=get_language_from_path(path), content=file_data.content)


@router.post("/{session_id}/workspace/github", response_model=LoadRepositoryResponse)
def load_github_repository(
    session_id: uuid.UUID,
    load_data: LoadRepositoryRequest,
    db: Session = Depends(get_db),
):
    """
    Load a GitHub repository into the session workspace.

    Downloads the tarball, strips GitHub's "owner-repo-sha/" root and
    mounts every text file. Binary files are skipped. Completed sessions
    are read-only.
    """
    session = get_session_or_404(db, session_id)

    if session.status == SessionStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session already completed",
        )

    try:
        owner, repo = parse_github_url(load_data.repo_url)
    except WorkspaceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        archive = fetch_github_tarball(owner, repo)
    except GitHubError as e:
        logger.error(f"Tarball download failed for {owner}/{repo}: {e}")
        raise_for_github_error(e)

    try:
        entries = extract_tarball(archive)
    except WorkspaceError as e:
        logger.error(f"Could not extract {owner}/{repo}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    workspace = get_session_workspace(session)
    mounted = workspace.mount(tar_files_to_tree(entries))
    logger.info(f"Mounted {mounted} files from {owner}/{repo} into session {session_id}")

    return LoadRepositoryResponse(
        owner=owner,
        repo=repo,
        files_mounted=mounted,
        file_tree=workspace.get_file_tree(),
    )
