"""Parsing chat messages and turning agent outcomes into replies."""

import re

from ..core.agent import AgentOutcome

GITHUB_REPO_PATTERN = re.compile(r"https?://github\.com/[\w-]+/[\w.-]+", re.IGNORECASE)
PR_URL_PATTERN = re.compile(r"https://github\.com/[\w-]+/[\w.-]+/pull/\d+")
MENTION_PATTERN = re.compile(r"<@[\w]+>")

GENERIC_ERROR_MESSAGE = "Something went wrong while working on your request. Please try again."


def extract_repo_url(text: str) -> str | None:
    """Return the first GitHub repository URL in text, without a .git suffix."""
    match = GITHUB_REPO_PATTERN.search(text or "")
    if not match:
        return None
    url = match.group(0)
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def extract_prompt(text: str) -> str:
    """Strip bot mentions and repository URLs, leaving the request itself."""
    text = MENTION_PATTERN.sub("", text or "")
    text = GITHUB_REPO_PATTERN.sub("", text)
    return text.strip()


def extract_pr_url(response: str | None) -> str | None:
    match = PR_URL_PATTERN.search(response or "")
    return match.group(0) if match else None


def format_outcome(outcome: AgentOutcome) -> str:
    """
    Chat reply for a finished run.

    The structured pr_url wins; otherwise the response text is searched for a
    pull request link, and failing that the text itself is sent.
    """
    pr_url = outcome.pr_url or extract_pr_url(outcome.response)
    if pr_url:
        return f"Done! Here's your PR: {pr_url}"
    return f"Done! {outcome.response or 'Changes have been made.'}"


def working_message(repo_url: str) -> str:
    return f"Working on it... I'll create a PR for `{repo_url}`"
