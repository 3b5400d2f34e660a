"""
Pydantic schemas for the project API.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ProjectCreate(BaseModel):
    name: str
    audio_id: str = Field(..., alias="audioId")


class LyricsLinePayload(BaseModel):
    id: Optional[str] = None
    text: str = ""
    timestamp: Optional[Union[float, str]] = None


class LyricsPayload(BaseModel):
    text: Optional[str] = None
    lines: Optional[list[LyricsLinePayload]] = None


class ProjectUpdate(BaseModel):
    """
    Partial project update.

    Only the fields declared here can be written onto a stored project.
    Anything else in the body (``id``, ``createdAt``, arbitrary keys) is kept
    aside in ``model_extra`` and never merged.
    """

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    description: Optional[str] = None
    audio_id: Optional[str] = Field(default=None, alias="audioId")
    lyrics_id: Optional[str] = Field(default=None, alias="lyricsId")
    asset_ids: Optional[list[str]] = Field(default=None, alias="assetIds")
    lyrics: Optional[LyricsPayload] = None

    def changes(self) -> dict[str, Any]:
        """Explicitly provided project fields, keyed by their stored name."""
        fields = type(self).model_fields
        return {
            fields[name].alias or name: getattr(self, name)
            for name in self.model_fields_set
            if name in fields and name != "lyrics"
        }

    def ignored_fields(self) -> list[str]:
        return sorted(self.model_extra or {})


class ProjectCreatedResponse(BaseModel):
    message: str
    id: str


class ProjectUpdatedResponse(BaseModel):
    message: str
    project: dict


class ProjectDeletedResponse(BaseModel):
    message: str
    id: str
    removed: list[str]
