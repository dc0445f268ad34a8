"""Git operations for Modal sandbox execution.

These functions execute commands within the sandbox's isolated filesystem
and return structured results with full logging.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import modal

logger = logging.getLogger(__name__)


@dataclass
class GitResult:
    """Result from a command run in the sandbox."""

    success: bool
    stdout: str
    stderr: str
    returncode: int
    operation: str

    def log(self, prefix: str = "[git]") -> None:
        """Log the result of this operation."""
        status = "OK" if self.success else "FAILED"
        logger.info(f"{prefix} {self.operation}: {status} (code={self.returncode})")
        if self.stderr.strip() and not self.success:
            logger.info(f"{prefix}   stderr: {self.stderr[:500]}")

    @property
    def message(self) -> str:
        """Best human-readable explanation of a failure."""
        return (self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}")[:1000]


def redact(text: str, secret: str | None) -> str:
    if secret and text:
        return text.replace(secret, "***")
    return text


async def run_command(
    sandbox: "modal.Sandbox",
    *args: str,
    operation: str,
    stdin: str | None = None,
    secret: str | None = None,
) -> GitResult:
    """
    Execute a command in the sandbox and wait for it.

    Args:
        sandbox: Modal sandbox instance
        *args: Command and arguments
        operation: Human-readable name for logging
        stdin: Optional text written to the process's stdin
        secret: Value scrubbed from stdout/stderr (e.g. a token in a clone URL)

    Returns:
        GitResult with command output
    """
    p = await sandbox.exec.aio(*args)
    if stdin is not None:
        p.stdin.write(stdin.encode("utf-8"))
        p.stdin.write_eof()
        await p.stdin.drain.aio()
    await p.wait.aio()

    return GitResult(
        success=p.returncode == 0,
        stdout=redact(await p.stdout.read.aio(), secret),
        stderr=redact(await p.stderr.read.aio(), secret),
        returncode=p.returncode,
        operation=operation,
    )


class SandboxGitService:
    """Git operations for Modal sandbox execution.

    Usage:
        git_service = SandboxGitService(sandbox, "/workspace")
        result = await git_service.configure_user("bot@example.com", "Bot")
        if not result.success:
            raise RuntimeError(result.stderr)
    """

    def __init__(self, sandbox: "modal.Sandbox", workspace: str, secret: str | None = None):
        self.sandbox = sandbox
        self.workspace = workspace
        self.secret = secret

    async def _exec(self, *args: str, operation: str) -> GitResult:
        result = await run_command(
            self.sandbox,
            "git", "-C", self.workspace, *args,
            operation=operation,
            secret=self.secret,
        )
        result.log()
        return result

    async def configure_user(self, email: str, name: str) -> GitResult:
        """
        Configure git user.name and user.email.

        Required before commits will work in a fresh sandbox.
        """
        result_email = await self._exec("config", "user.email", email, operation="config user.email")
        if not result_email.success:
            return result_email
        return await self._exec("config", "user.name", name, operation="config user.name")

    async def status(self) -> GitResult:
        return await self._exec("status", "--porcelain", operation="status")

    async def add_all(self) -> GitResult:
        """Stage all changes (git add -A)."""
        return await self._exec("add", "-A", operation="add -A")

    async def commit(self, message: str) -> GitResult:
        return await self._exec("commit", "-m", message, operation="commit")

    async def checkout(self, branch: str, create: bool = False) -> GitResult:
        args = ["checkout"]
        if create:
            args.append("-b")
        args.append(branch)
        return await self._exec(*args, operation=f"checkout {'-b ' if create else ''}{branch}")

    async def set_remote_url(self, url: str, remote: str = "origin") -> GitResult:
        return await self._exec("remote", "set-url", remote, url, operation=f"remote set-url {remote}")

    async def push(self, branch: str, remote_url: str | None = None) -> GitResult:
        """
        Push a branch to origin.

        When remote_url is given (an authenticated URL) the push goes straight
        to it and nothing is written to .git/config.
        """
        if remote_url:
            return await self._exec("push", remote_url, branch, operation=f"push origin/{branch}")
        return await self._exec("push", "-u", "origin", branch, operation=f"push origin/{branch}")

    async def has_changes(self) -> bool:
        """True if there are staged or unstaged changes."""
        result = await self.status()
        return bool(result.stdout.strip())


async def clone_repository(
    sandbox: "modal.Sandbox",
    repo_url: str,
    workspace: str,
    secret: str | None = None,
) -> GitResult:
    """
    Clone a repository in the sandbox.

    Args:
        sandbox: Modal sandbox instance
        repo_url: Git repository URL (may include auth token)
        workspace: Destination path
        secret: Token embedded in repo_url, scrubbed from the output

    Returns:
        GitResult
    """
    result = await run_command(
        sandbox, "git", "clone", repo_url, workspace,
        operation="clone",
        secret=secret,
    )
    result.log()
    return result
