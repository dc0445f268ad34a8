"""Repo Agent: a language model that edits GitHub repositories and opens pull requests."""

__version__ = "0.1.0"
