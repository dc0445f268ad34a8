"""Modal-backed sandbox provider.

Each sandbox is a Modal Sandbox holding a clone of the target repository at
the configured workspace path. File operations run as commands inside the
sandbox; pull requests are pushed from the sandbox and opened through the
GitHub REST API.
"""

import asyncio
import logging
import posixpath
from datetime import datetime
from typing import Any
from uuid import uuid4

import modal

from ..config import settings
from ..schemas.tools import PullRequestSpec
from .git_sandbox import SandboxGitService, clone_repository, run_command
from .github import GitHubService
from .sandbox_provider import SandboxError, SandboxHandle, SandboxProvider

logger = logging.getLogger(__name__)

# Writes stdin to $1, creating parent directories as needed
_WRITE_FILE_SCRIPT = 'mkdir -p "$(dirname "$1")" && cat > "$1"'


def get_sandbox_image() -> modal.Image:
    """Get the Modal image for sandbox execution."""
    return modal.Image.debian_slim(python_version="3.11").apt_install("git")


def generate_branch_name() -> str:
    """Generate a branch name like repo-agent/20261019143000-1a2b3c."""
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"{settings.branch_prefix}/{timestamp}-{uuid4().hex[:6]}"


class ModalSandboxProvider(SandboxProvider):
    """SandboxProvider running each workspace in its own Modal Sandbox."""

    def __init__(
        self,
        app_name: str | None = None,
        timeout: int | None = None,
        cpu: int | None = None,
        memory: int | None = None,
        workspace: str | None = None,
    ):
        self.app_name = app_name or settings.modal_app_name
        self.timeout = timeout or settings.sandbox_timeout
        self.cpu = cpu or settings.sandbox_cpu
        self.memory = memory or settings.sandbox_memory
        self.workspace = workspace or settings.workspace_path
        self._app: modal.App | None = None

    async def _get_app(self) -> modal.App:
        if self._app is None:
            self._app = await modal.App.lookup.aio(self.app_name, create_if_missing=True)
        return self._app

    @staticmethod
    def _resolve(handle: SandboxHandle, path: str | None) -> str:
        if not path:
            return handle.workspace
        return posixpath.join(handle.workspace, path)

    async def create_sandbox(self, repo_url: str) -> SandboxHandle:
        """
        Create a sandbox and clone the repository into it.

        Raises:
            SandboxError: If the clone or git setup fails
            GitHubError: If credentials for the repository cannot be obtained
        """
        token = await GitHubService.get_token(repo_url)
        clone_url = repo_url
        if token:
            clone_url = GitHubService.get_authenticated_repo_url(repo_url, token)

        sandbox = await modal.Sandbox.create.aio(
            app=await self._get_app(),
            image=get_sandbox_image(),
            timeout=self.timeout,
            cpu=self.cpu,
            memory=self.memory,
        )
        handle = SandboxHandle(
            sandbox_id=sandbox.object_id,
            repo_url=repo_url,
            workspace=self.workspace,
            sandbox=sandbox,
            token=token,
        )
        logger.info(f"Sandbox created: {handle.sandbox_id}")

        try:
            result = await clone_repository(sandbox, clone_url, self.workspace, secret=token)
            if not result.success:
                raise SandboxError(f"git clone failed: {result.message}")

            git = SandboxGitService(sandbox, self.workspace, secret=token)
            if token:
                # The model can read .git/config; keep the token out of it
                result = await git.set_remote_url(repo_url)
                if not result.success:
                    raise SandboxError(f"git remote set-url failed: {result.message}")

            result = await git.configure_user(settings.git_author_email, settings.git_author_name)
            if not result.success:
                raise SandboxError(f"git config failed: {result.message}")
        except BaseException:
            # Includes cancellation: the caller never receives this handle
            await asyncio.shield(self.stop(handle))
            raise

        return handle

    async def read_file(self, handle: SandboxHandle, path: str) -> dict[str, str]:
        result = await run_command(
            handle.sandbox, "cat", "--", self._resolve(handle, path),
            operation=f"read {path}",
            secret=handle.token,
        )
        if not result.success:
            raise SandboxError(f"Failed to read {path}: {result.message}")
        return {"content": result.stdout}

    async def list_files(self, handle: SandboxHandle, path: str | None) -> str:
        result = await run_command(
            handle.sandbox, "ls", "-1Ap", "--", self._resolve(handle, path),
            operation=f"list {path or '.'}",
            secret=handle.token,
        )
        if not result.success:
            raise SandboxError(f"Failed to list {path or '.'}: {result.message}")
        return result.stdout

    async def _write_file(self, handle: SandboxHandle, full_path: str, content: str) -> None:
        result = await run_command(
            handle.sandbox, "bash", "-c", _WRITE_FILE_SCRIPT, "write", full_path,
            operation=f"write {full_path}",
            stdin=content,
        )
        if not result.success:
            raise SandboxError(f"Failed to write {full_path}: {result.message}")

    async def edit_file(
        self,
        handle: SandboxHandle,
        path: str,
        old_str: str,
        new_str: str,
    ) -> dict[str, Any]:
        """
        Replace exactly one occurrence of old_str with new_str.

        A file that does not exist yet is created with new_str as its content.

        Raises:
            SandboxError: If old_str matches zero or several times
        """
        full_path = self._resolve(handle, path)
        exists = await run_command(
            handle.sandbox, "test", "-f", full_path,
            operation=f"exists {path}",
        )
        if not exists.success:
            await self._write_file(handle, full_path, new_str)
            logger.info(f"Created {path} in sandbox {handle.sandbox_id}")
            return {"path": path, "output": f"Created {path}"}

        content = (await self.read_file(handle, path))["content"]
        if not old_str:
            raise SandboxError(f"old_str must not be empty when editing existing file {path}")

        count = content.count(old_str)
        if count == 0:
            raise SandboxError(f"old_str not found in {path}")
        if count > 1:
            raise SandboxError(
                f"old_str found {count} times in {path}; it must match exactly once. "
                "Include more surrounding context to make it unique."
            )

        await self._write_file(handle, full_path, content.replace(old_str, new_str, 1))
        logger.info(f"Edited {path} in sandbox {handle.sandbox_id}")
        return {"path": path, "output": f"Edited {path}"}

    async def create_pr(
        self,
        handle: SandboxHandle,
        repo_url: str,
        spec: PullRequestSpec,
    ) -> dict[str, Any]:
        """
        Commit every change in the workspace to a new branch and open a pull request.

        Returns:
            Dict with url, number and branch of the pull request

        Raises:
            SandboxError: If there is nothing to commit or a git step fails
            GitHubError: If GitHub rejects the pull request
        """
        branch = (spec.branch or "").strip() or generate_branch_name()
        git = SandboxGitService(handle.sandbox, handle.workspace, secret=handle.token)

        if not await git.has_changes():
            raise SandboxError("No changes to commit")

        result = await git.checkout(branch, create=True)
        if result.success:
            result = await git.add_all()
        if result.success:
            result = await git.commit(spec.title)
        if result.success:
            push_url = None
            if handle.token:
                push_url = GitHubService.get_authenticated_repo_url(repo_url, handle.token)
            result = await git.push(branch, remote_url=push_url)
        if not result.success:
            raise SandboxError(f"git {result.operation} failed: {result.message}")

        return await GitHubService.create_pull_request(
            repo_url,
            title=spec.title,
            body=spec.body,
            head=branch,
            token=handle.token,
        )

    async def stop(self, handle: SandboxHandle) -> None:
        """Terminate the sandbox."""
        if handle.stopped:
            return
        handle.stopped = True
        try:
            await handle.sandbox.terminate.aio()
            logger.info(f"Sandbox terminated: {handle.sandbox_id}")
        except Exception as e:
            logger.warning(f"Failed to terminate sandbox {handle.sandbox_id}: {e}")
