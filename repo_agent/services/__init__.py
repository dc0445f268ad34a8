"""Service layer: sandbox providers and GitHub access."""

from .git_sandbox import GitResult, SandboxGitService, clone_repository, run_command
from .github import GitHubError, GitHubService
from .sandbox_provider import SandboxError, SandboxHandle, SandboxProvider

__all__ = [
    "GitHubError",
    "GitHubService",
    "GitResult",
    "SandboxError",
    "SandboxGitService",
    "SandboxHandle",
    "SandboxProvider",
    "clone_repository",
    "run_command",
]
