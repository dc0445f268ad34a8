"""Input schemas for the tools offered to the language model.

Field descriptions are sent to the model as part of each tool's JSON schema.
"""

from pydantic import BaseModel, Field


class ReadFileInput(BaseModel):
    path: str = Field(
        ...,
        description="The relative path of a file in the working directory.",
    )


class ListFilesInput(BaseModel):
    path: str | None = Field(
        default=None,
        description=(
            "Optional relative path to list files from. "
            "Defaults to current directory if not provided."
        ),
    )


class EditFileInput(BaseModel):
    path: str = Field(..., description="The path to the file")
    old_str: str = Field(
        ...,
        description="Text to search for - must match exactly and must only have one match exactly",
    )
    new_str: str = Field(..., description="Text to replace old_str with")


class PullRequestSpec(BaseModel):
    """Pull request details supplied by the model to create_pr."""

    title: str = Field(..., description="The title of the pull request")
    body: str = Field(..., description="The body/description of the pull request")
    branch: str | None = Field(
        default=None,
        description="The name of the branch to create (defaults to a generated name)",
    )
