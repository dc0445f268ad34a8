"""System prompt for the repository coding agent."""

SYSTEM_PROMPT = """You are a coding agent working on a remote code repository.

You can only inspect and change the repository through the provided tools:
list_files, read_file, edit_file and create_pr. You cannot run commands.

Your responses must be concise.

If you make changes to the codebase, be sure to run the create_pr tool once
you are done, and include the pull request URL in your final answer."""


def get_system_prompt(repo_url: str | None = None) -> str:
    """
    Build the system prompt for one run.

    Runs without a repository get a note so the model answers directly
    instead of calling tools that will fail.
    """
    if repo_url:
        return f"{SYSTEM_PROMPT}\n\nREPOSITORY: {repo_url}"
    return f"{SYSTEM_PROMPT}\n\nNo repository was provided for this request."
