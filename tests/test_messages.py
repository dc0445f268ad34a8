"""Tests for chat message parsing and reply formatting."""

import pytest

from repo_agent.core.agent import AgentOutcome
from repo_agent.routes.messages import (
    extract_pr_url,
    extract_prompt,
    extract_repo_url,
    format_outcome,
    working_message,
)
from tests.test_data.fakes import PR_URL, REPO_URL


@pytest.mark.parametrize(
    "text, expected",
    [
        (f"please fix {REPO_URL} thanks", REPO_URL),
        (f"{REPO_URL}.git", REPO_URL),
        ("http://GitHub.com/acme/widgets", "http://GitHub.com/acme/widgets"),
        ("no links here", None),
        ("https://gitlab.com/acme/widgets", None),
        ("", None),
    ],
)
def test_extract_repo_url(text, expected):
    assert extract_repo_url(text) == expected


def test_extract_prompt_strips_mentions_and_urls():
    assert extract_prompt(f"<@U123ABC> add a contributing section {REPO_URL}") == "add a contributing section"


def test_extract_prompt_empty_when_only_mention():
    assert extract_prompt(f"<@U123ABC> {REPO_URL}") == ""


def test_extract_pr_url():
    assert extract_pr_url(f"Created the PR at {PR_URL}.") == PR_URL
    assert extract_pr_url("No pull request this time") is None
    assert extract_pr_url(None) is None


class TestFormatOutcome:
    def test_structured_pr_url_wins(self):
        outcome = AgentOutcome(response="Finished.", pr_url=PR_URL)
        assert format_outcome(outcome) == f"Done! Here's your PR: {PR_URL}"

    def test_pr_url_found_in_text(self):
        outcome = AgentOutcome(response=f"See {PR_URL} for details")
        assert format_outcome(outcome) == f"Done! Here's your PR: {PR_URL}"

    def test_plain_response(self):
        assert format_outcome(AgentOutcome(response="Answered your question.")) == "Done! Answered your question."

    def test_empty_response(self):
        assert format_outcome(AgentOutcome(response="")) == "Done! Changes have been made."


def test_working_message_names_the_repo():
    assert REPO_URL in working_message(REPO_URL)
