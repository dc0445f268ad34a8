"""Sandbox provider interface consumed by the agent tools.

A provider manages remote ephemeral workspaces, each bound to a clone of one
repository. The agent never talks to a concrete sandbox backend directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..schemas.tools import PullRequestSpec


class SandboxError(Exception):
    """A sandbox operation failed. The message is reported to the model verbatim."""


@dataclass
class SandboxHandle:
    """Reference to one live sandbox."""

    sandbox_id: str
    repo_url: str
    workspace: str
    sandbox: Any = None  # backend object (e.g. modal.Sandbox)
    token: str | None = field(default=None, repr=False)
    stopped: bool = False


class SandboxProvider(ABC):
    """Operations against one remote workspace per handle.

    Usage:
        handle = await provider.create_sandbox(repo_url)
        try:
            content = (await provider.read_file(handle, "README.md"))["content"]
        finally:
            await provider.stop(handle)
    """

    @abstractmethod
    async def create_sandbox(self, repo_url: str) -> SandboxHandle:
        """Create a sandbox holding a fresh clone of `repo_url`."""

    @abstractmethod
    async def read_file(self, handle: SandboxHandle, path: str) -> dict[str, str]:
        """Return {"content": ...} for a file relative to the workspace."""

    @abstractmethod
    async def list_files(self, handle: SandboxHandle, path: str | None) -> str:
        """Return a directory listing; None lists the workspace root."""

    @abstractmethod
    async def edit_file(
        self,
        handle: SandboxHandle,
        path: str,
        old_str: str,
        new_str: str,
    ) -> dict[str, Any]:
        """Replace the single occurrence of old_str, or create the file with new_str."""

    @abstractmethod
    async def create_pr(
        self,
        handle: SandboxHandle,
        repo_url: str,
        spec: PullRequestSpec,
    ) -> dict[str, Any]:
        """Commit all changes, push a branch and open a pull request."""

    @abstractmethod
    async def stop(self, handle: SandboxHandle) -> None:
        """Tear the sandbox down. Calling it twice is a no-op."""
