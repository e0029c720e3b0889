"""
Project Workspace Service.

Holds the files a candidate investigates during a session. The browser
editor mounts the same nested FileSystemTree format that this module builds:

    {"src": {"directory": {"index.ts": {"file": {"contents": "..."}}}}}

Workspaces are seeded from a problem's embedded project files or from a
GitHub tarball, and are kept in memory by a process-wide registry.
"""

from __future__ import annotations

import io
import re
import tarfile
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from hirehiker.core.log import get_service_logger

logger = get_service_logger("workspace", "WORKSPACE")

IGNORED_DIRECTORIES = frozenset({"node_modules", ".git", "dist", "build", ".cache"})

LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "json": "json",
    "css": "css",
    "scss": "scss",
    "html": "html",
    "md": "markdown",
    "yaml": "yaml",
    "yml": "yaml",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "sql": "sql",
    "sh": "shell",
    "bash": "shell",
}

GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/?#]+)")


class WorkspaceError(Exception):
    """Raised for invalid paths or unreadable archives."""


class InvalidGitHubUrl(WorkspaceError):
    """Raised when a repository URL is not a github.com/owner/repo URL."""


@dataclass
class TarEntry:
    """A file or directory pulled out of a repository tarball."""

    path: str
    content: bytes
    is_directory: bool


# ============== Path Helpers ==============


def get_language_from_path(file_path: str) -> str:
    """Map a file extension to a syntax-highlighting language name."""
    if "." not in file_path:
        return "plaintext"
    extension = file_path.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(extension, "plaintext")


def normalize_path(path: str) -> str:
    """
    Normalize a project-relative path ("./src//a.ts" -> "src/a.ts").

    Raises WorkspaceError for empty paths or paths escaping the project root.
    """
    parts = [part for part in path.strip().replace("\\", "/").split("/") if part and part != "."]
    if not parts:
        raise WorkspaceError("File path must not be empty")
    if ".." in parts:
        raise WorkspaceError(f"File path must stay inside the project: {path}")
    return "/".join(parts)


def is_ignored(path: str) -> bool:
    return any(part in IGNORED_DIRECTORIES for part in path.split("/"))


def parse_github_url(repo_url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL, dropping a trailing .git."""
    match = GITHUB_URL_PATTERN.search(repo_url or "")
    if not match:
        raise InvalidGitHubUrl(
            "Invalid GitHub URL. Expected format: https://github.com/owner/repo"
        )
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


# ============== File Trees ==============


def project_files_to_tree(files: Iterable[dict[str, Any]]) -> dict:
    """
    Convert embedded project files into a FileSystemTree.

    Each file is {"path", "language", "content"}; a later file with the same
    path replaces an earlier one.
    """
    tree: dict = {}

    for project_file in files:
        parts = project_file["path"].split("/")
        current = tree

        for index, part in enumerate(parts):
            if index == len(parts) - 1:
                current[part] = {"file": {"contents": project_file.get("content", "")}}
                continue

            node = current.setdefault(part, {"directory": {}})
            if "directory" not in node:
                logger.warning(f"Path conflict at {part!r} while placing {project_file['path']}")
                break
            current = node["directory"]

    return tree


def extract_tarball(data: bytes) -> list[TarEntry]:
    """
    Unpack a (gzipped) repository tarball.

    GitHub wraps everything in a single "owner-repo-sha/" directory; that
    root prefix is detected from the first path containing a slash and
    stripped from every entry. The root directory itself is skipped.
    """
    entries: list[TarEntry] = []
    root_prefix = ""

    try:
        archive = tarfile.open(fileobj=io.BytesIO(data), mode="r:*")
    except tarfile.TarError as e:
        raise WorkspaceError(f"Could not read repository archive: {e}") from e

    with archive:
        for member in archive:
            if not (member.isdir() or member.isfile()):
                continue

            name = member.name
            if member.isdir() and not name.endswith("/"):
                name = f"{name}/"
            if not name:
                continue

            if not root_prefix and "/" in name:
                root_prefix = name.split("/", 1)[0] + "/"

            relative_path = name[len(root_prefix):] if name.startswith(root_prefix) else name
            if not relative_path or relative_path in ("/", "./"):
                continue

            content = b""
            if member.isfile() and member.size > 0:
                extracted = archive.extractfile(member)
                if extracted is not None:
                    content = extracted.read()

            entries.append(
                TarEntry(
                    path=relative_path.rstrip("/"),
                    content=content,
                    is_directory=member.isdir(),
                )
            )

    return entries


def tar_files_to_tree(entries: Iterable[TarEntry]) -> dict:
    """Convert extracted tar entries into a FileSystemTree, skipping binary files."""
    tree: dict = {}

    for entry in sorted(entries, key=lambda e: e.path):
        parts = [part for part in entry.path.split("/") if part]
        if not parts:
            continue

        current = tree
        for index, part in enumerate(parts):
            is_last = index == len(parts) - 1

            if is_last and not entry.is_directory:
                try:
                    contents = entry.content.decode("utf-8")
                except UnicodeDecodeError:
                    logger.warning(f"Skipping binary file: {entry.path}")
                    break
                current[part] = {"file": {"contents": contents}}
                break

            node = current.setdefault(part, {"directory": {}})
            if "directory" not in node:
                logger.warning(f"Path conflict at {part!r} while placing {entry.path}")
                break
            current = node["directory"]

    return tree


def tree_to_files(tree: dict, prefix: str = "") -> dict[str, str]:
    """Flatten a FileSystemTree into {path: contents}."""
    files: dict[str, str] = {}

    for name, node in tree.items():
        path = f"{prefix}/{name}" if prefix else name
        if "directory" in node:
            files.update(tree_to_files(node["directory"], path))
        elif "file" in node:
            files[path] = node["file"].get("contents", "")

    return files


# ============== Workspace ==============


class Workspace:
    """In-memory project files of one candidate session."""

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._lock = threading.Lock()

    def mount(self, tree: dict) -> int:
        """Merge a FileSystemTree into the workspace; returns the file count mounted."""
        files = tree_to_files(tree)
        with self._lock:
            self._files.update(files)
        return len(files)

    def read_file(self, path: str) -> Optional[str]:
        with self._lock:
            return self._files.get(normalize_path(path))

    def write_file(self, path: str, content: str) -> str:
        normalized = normalize_path(path)
        with self._lock:
            self._files[normalized] = content
        return normalized

    def get_file_tree(self) -> list[str]:
        """Sorted file paths, without dependency and build directories."""
        with self._lock:
            return sorted(path for path in self._files if not is_ignored(path))

    def get_all_files(self) -> dict[str, str]:
        """{path: content} for every file outside ignored directories."""
        with self._lock:
            return {path: content for path, content in self._files.items() if not is_ignored(path)}

    def to_tree(self) -> dict:
        files = [{"path": path, "content": content} for path, content in self.get_all_files().items()]
        return project_files_to_tree(files)


class WorkspaceRegistry:
    """Workspaces keyed by session id."""

    def __init__(self) -> None:
        self._workspaces: dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def get(self, session_id: Any) -> Optional[Workspace]:
        with self._lock:
            return self._workspaces.get(str(session_id))

    def get_or_create(self, session_id: Any, project_files: Optional[list[dict]] = None) -> Workspace:
        """
        Return the session's workspace, creating it on first access.

        A new workspace is seeded with the problem's embedded project files.
        """
        key = str(session_id)
        with self._lock:
            workspace = self._workspaces.get(key)
            if workspace is None:
                workspace = Workspace()
                if project_files:
                    mounted = workspace.mount(project_files_to_tree(project_files))
                    logger.info(f"Seeded workspace {key} with {mounted} files")
                self._workspaces[key] = workspace
            return workspace

    def discard(self, session_id: Any) -> None:
        with self._lock:
            self._workspaces.pop(str(session_id), None)

    def clear(self) -> None:
        with self._lock:
            self._workspaces.clear()


_registry: Optional[WorkspaceRegistry] = None
_registry_lock = threading.Lock()


def get_workspace_registry() -> WorkspaceRegistry:
    """Return the process-wide workspace registry."""
    global _registry

    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = WorkspaceRegistry()
    return _registry
