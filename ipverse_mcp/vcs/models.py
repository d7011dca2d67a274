"""Pydantic models for VCS data."""

from typing import Literal

from pydantic import BaseModel, Field


class DiffEntry(BaseModel):
    """One changed entry between two trees."""

    status: Literal["A", "C", "D", "M", "R", "T", "U"] = Field(
        description="Change type as reported by git (added, modified, renamed, ...)"
    )
    old_path: str | None = None
    new_path: str = Field(description="Repo-relative path on the new side of the diff")
