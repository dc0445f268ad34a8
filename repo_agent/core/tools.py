"""Tools the language model can call during a run.

Every tool validates its input against a pydantic model, checks the run's
preconditions, and then delegates to the sandbox provider. Whatever happens,
ToolRegistry.execute() returns a JSON-serializable dict: the tool's payload on
success, or {"error": message} on failure. Nothing is raised into the loop.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from ..schemas.tools import EditFileInput, ListFilesInput, PullRequestSpec, ReadFileInput
from .lifecycle import SandboxLifecycle
from .llm import ToolCall

logger = logging.getLogger(__name__)

# Never listed: VCS internals and dependency trees flood the model context
RESTRICTED_LIST_PATHS = frozenset({".git", "node_modules"})


class ToolError(Exception):
    """A tool refused its input before reaching the sandbox."""


class MissingRepoError(ToolError):
    """The run has no repository, so repository tools are unavailable."""


class ToolValidationError(ToolError):
    """The arguments are well-formed but not acceptable."""


ToolHandler = Callable[[Any], Awaitable[Any]]


@dataclass
class Tool:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    def schema(self) -> dict[str, Any]:
        """OpenAI-style function definition sent to the model."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_model.model_json_schema(),
            },
        }


class ToolRegistry:
    """Closed set of tools, dispatched by name."""

    def __init__(self, tools: list[Tool]):
        self._tools = {tool.name: tool for tool in tools}

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def schemas(self) -> list[dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    async def execute(self, call: ToolCall) -> dict[str, Any]:
        """Run one tool call and return its ToolResult."""
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {call.name}")
            return {"error": f"Unknown tool: {call.name}"}

        try:
            args = tool.input_model.model_validate_json(call.arguments or "{}")
        except ValidationError as e:
            return {"error": f"Invalid arguments for {call.name}: {e}"}

        logger.info(f"Running tool {call.name}")
        try:
            return await tool.handler(args)
        except ToolError as e:
            return _error_result(args, str(e))
        except Exception as e:
            logger.warning(f"Tool {call.name} failed: {type(e).__name__}: {e}")
            return _error_result(args, str(e) or type(e).__name__)


def _error_result(args: BaseModel, message: str) -> dict[str, Any]:
    result: dict[str, Any] = {"error": message}
    path = getattr(args, "path", None)
    if path:
        result["path"] = path
    return result


def build_registry(sandboxes: SandboxLifecycle) -> ToolRegistry:
    """Build the tools for one run, bound to that run's sandbox lifecycle."""
    provider = sandboxes.provider
    repo_url = sandboxes.repo_url

    def require_repo(action: str) -> str:
        if not repo_url:
            raise MissingRepoError(f"A repo_url is required to {action}.")
        return repo_url

    async def read_file(args: ReadFileInput) -> dict[str, Any]:
        require_repo("read files")
        handle = await sandboxes.ensure()
        result = await provider.read_file(handle, args.path)
        return {"path": args.path, "output": result["content"]}

    async def list_files(args: ListFilesInput) -> dict[str, Any]:
        require_repo("list files")
        target = (args.path or "").strip() or None
        if target and posixpath.normpath(target) in RESTRICTED_LIST_PATHS:
            raise ToolValidationError(f"You cannot read the path: {target}")
        handle = await sandboxes.ensure()
        output = await provider.list_files(handle, target)
        return {"path": target or ".", "output": output}

    async def edit_file(args: EditFileInput) -> dict[str, Any]:
        require_repo("edit files")
        if args.old_str == args.new_str:
            raise ToolValidationError("old_str and new_str must be different")
        handle = await sandboxes.ensure()
        return await provider.edit_file(handle, args.path, args.old_str, args.new_str)

    async def create_pr(args: PullRequestSpec) -> dict[str, Any]:
        url = require_repo("create pull requests")
        handle = await sandboxes.ensure()
        return await provider.create_pr(handle, url, args)

    return ToolRegistry([
        Tool(
            name="read_file",
            description=(
                "Read the contents of a given relative file path. Use this when you want "
                "to see what's inside a file. Do not use this with directory names."
            ),
            input_model=ReadFileInput,
            handler=read_file,
        ),
        Tool(
            name="list_files",
            description=(
                "List files and directories at a given path. "
                "If no path is provided, lists files in the current directory."
            ),
            input_model=ListFilesInput,
            handler=list_files,
        ),
        Tool(
            name="edit_file",
            description=(
                "Make edits to a text file. Replaces 'old_str' with 'new_str' in the given file. "
                "'old_str' and 'new_str' MUST be different from each other. "
                "If the file specified with path doesn't exist, it will be created."
            ),
            input_model=EditFileInput,
            handler=edit_file,
        ),
        Tool(
            name="create_pr",
            description=(
                "Create a pull request with the current changes. This will add all files, "
                "commit changes, push to a new branch, and create a PR using GitHub's REST API. "
                "Use this as the final step when making changes."
            ),
            input_model=PullRequestSpec,
            handler=create_pr,
        ),
    ])
