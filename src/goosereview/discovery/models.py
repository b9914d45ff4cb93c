# src/goosereview/discovery/models.py — v1
"""Discovery models: CandidateFile, DiscoveryError."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CandidateFile(BaseModel):
    """A file eligible for analysis, produced fresh on every walk."""

    absolute_path: str
    relative_path: str
    size_bytes: int


class DiscoveryError(BaseModel):
    """A subtree that could not be read. The walk continues past it."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str
    message: str
