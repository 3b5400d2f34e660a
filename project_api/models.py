"""
Record types and key layout for projects, lyrics and audio.

Projects are kept as plain JSON objects so that fields written by other
clients survive a read-merge-write cycle untouched. Lyrics and audio use
dataclasses with explicit camelCase serialization.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, TypedDict, Union

PROJECT_KEY_PREFIX = "project:"
LYRICS_KEY_PREFIX = "lyrics:"
AUDIO_KEY_PREFIX = "audio:"

AUDIO_BLOB_EXTENSION = "mp3"
DEFAULT_COVER_ART_EXTENSION = "jpg"


class Project(TypedDict, total=False):
    id: str
    name: str
    description: Optional[str]
    audioId: str
    lyricsId: Optional[str]
    assetIds: Optional[list[str]]
    createdAt: str
    updatedAt: str


def project_key(project_id: str) -> str:
    return f"{PROJECT_KEY_PREFIX}{project_id}"


def lyrics_key(lyrics_id: str) -> str:
    return f"{LYRICS_KEY_PREFIX}{lyrics_id}"


def audio_key(audio_id: str) -> str:
    return f"{AUDIO_KEY_PREFIX}{audio_id}"


def audio_blob_key(audio_id: str) -> str:
    return f"{audio_id}.{AUDIO_BLOB_EXTENSION}"


def new_id() -> str:
    return str(uuid.uuid4())


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return _format_timestamp(datetime.now(timezone.utc))


def next_timestamp(previous: Optional[str]) -> str:
    """
    Return a timestamp strictly later than ``previous``.

    Two mutations landing within the same millisecond would otherwise share an
    ``updatedAt``; in that case the previous value is advanced by one
    millisecond instead.
    """
    now = datetime.now(timezone.utc)
    if not previous:
        return _format_timestamp(now)
    try:
        last = _parse_timestamp(previous)
    except ValueError:
        return _format_timestamp(now)
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    if now <= last:
        now = last + timedelta(milliseconds=1)
    return _format_timestamp(now)


def new_project(name: str, audio_id: str) -> Project:
    now = utc_now_iso()
    return Project(
        id=new_id(),
        name=name,
        createdAt=now,
        updatedAt=now,
        audioId=audio_id,
    )


@dataclass
class LyricsLine:
    text: str = ""
    id: str = field(default_factory=new_id)
    timestamp: Optional[Union[float, str]] = None

    def as_dict(self) -> dict:
        data: dict[str, Any] = {"id": self.id, "text": self.text}
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass
class Lyrics:
    project_id: str
    text: str = ""
    lines: list[LyricsLine] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = ""

    def __post_init__(self):
        if not self.updated_at:
            self.updated_at = self.created_at

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "text": self.text,
            "lines": [line.as_dict() for line in self.lines],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class CoverArt:
    id: str
    format: Optional[str] = None

    @property
    def extension(self) -> str:
        # "image/png" -> "png"; anything without a subtype falls back to jpg.
        if not self.format or "/" not in self.format:
            return DEFAULT_COVER_ART_EXTENSION
        subtype = self.format.split("/", 1)[1].strip()
        return subtype or DEFAULT_COVER_ART_EXTENSION

    @property
    def blob_key(self) -> str:
        return f"{self.id}.{self.extension}"


@dataclass
class Audio:
    id: str
    cover_art: Optional[CoverArt] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Audio":
        cover = data.get("coverArt")
        cover_art = None
        if isinstance(cover, dict) and cover.get("id"):
            cover_art = CoverArt(id=str(cover["id"]), format=cover.get("format"))
        return cls(id=str(data.get("id", "")), cover_art=cover_art)
