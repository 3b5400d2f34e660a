"""
Project operations over the key-value and blob stores.

None of these operations are atomic. Two concurrent updates of the same
project race on read-modify-write and the later write wins; a cascading
delete that fails partway leaves the remaining records and blobs behind.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from project_api.errors import AudioNotFoundError, CascadeDeleteError, ProjectNotFoundError
from project_api.kv import KeyValueStore
from project_api.models import (
    PROJECT_KEY_PREFIX,
    Audio,
    Lyrics,
    LyricsLine,
    Project,
    audio_blob_key,
    audio_key,
    lyrics_key,
    new_project,
    next_timestamp,
    project_key,
)
from project_api.schemas import LyricsPayload, ProjectUpdate
from project_api.storage import BlobStore

logger = logging.getLogger(__name__)

STEP_PROJECT = "project"
STEP_AUDIO_RECORD = "audio_record"
STEP_AUDIO_BLOB = "audio_blob"
STEP_COVER_BLOB = "cover_blob"


@dataclass
class DeleteResult:
    project_id: str
    removed: list[str] = field(default_factory=list)


class ProjectService:
    def __init__(
        self,
        kv: KeyValueStore,
        blobs: BlobStore,
        *,
        cascade_delete: bool = True,
        link_lyrics_to_project: bool = False,
    ):
        self.kv = kv
        self.blobs = blobs
        self.cascade_delete = cascade_delete
        self.link_lyrics_to_project = link_lyrics_to_project

    async def _load_project(self, project_id: str) -> Project:
        raw = await self.kv.get(project_key(project_id))
        if raw is None:
            raise ProjectNotFoundError(project_id)
        return json.loads(raw)

    async def _save_project(self, project: Project) -> None:
        project["updatedAt"] = next_timestamp(project.get("updatedAt"))
        await self.kv.put(project_key(project["id"]), json.dumps(project))

    async def create_project(self, name: str, audio_id: str) -> Project:
        project = new_project(name, audio_id)
        await self.kv.put(project_key(project["id"]), json.dumps(project))
        logger.info("Created project %s", project["id"])
        return project

    async def list_projects(self) -> list[Project]:
        keys = await self.kv.list(PROJECT_KEY_PREFIX)
        if not keys:
            return []

        raws = await asyncio.gather(*(self.kv.get(key) for key in keys))
        projects: list[Project] = []
        for key, raw in zip(keys, raws):
            if raw is None:
                logger.debug("Project %s vanished between list and get", key)
                continue
            projects.append(json.loads(raw))
        return projects

    async def get_project(self, project_id: str) -> Project:
        return await self._load_project(project_id)

    async def _create_lyrics(self, project_id: str, payload: LyricsPayload) -> Lyrics:
        lines: list[LyricsLine] = []
        for line in payload.lines or []:
            entry = LyricsLine(text=line.text, timestamp=line.timestamp)
            if line.id:
                entry.id = line.id
            lines.append(entry)
        lyrics = Lyrics(project_id=project_id, text=payload.text or "", lines=lines)
        await self.kv.put(lyrics_key(lyrics.id), json.dumps(lyrics.as_dict()))
        logger.info("Created lyrics %s for project %s", lyrics.id, project_id)
        return lyrics

    async def update_project(self, project_id: str, update: ProjectUpdate) -> Project:
        project = await self._load_project(project_id)

        ignored = update.ignored_fields()
        if ignored:
            logger.debug("Ignoring non-updatable fields %s for project %s", ignored, project_id)

        changes = update.changes()
        if update.lyrics is not None:
            lyrics = await self._create_lyrics(project_id, update.lyrics)
            if self.link_lyrics_to_project:
                changes["lyricsId"] = lyrics.id
            else:
                logger.warning(
                    "Lyrics %s created for project %s but not linked via lyricsId",
                    lyrics.id,
                    project_id,
                )

        project.update(changes)
        await self._save_project(project)
        logger.info("Updated project %s", project_id)
        return project

    async def delete_project(self, project_id: str) -> DeleteResult:
        project = await self._load_project(project_id)
        if not self.cascade_delete:
            await self.kv.delete(project_key(project_id))
            logger.info("Deleted project %s", project_id)
            return DeleteResult(project_id=project_id, removed=[STEP_PROJECT])

        audio_id: Optional[str] = project.get("audioId")
        raw_audio = await self.kv.get(audio_key(audio_id)) if audio_id else None
        audio_data = json.loads(raw_audio) if raw_audio is not None else None
        # Anything other than a JSON object is not a usable audio record.
        if not isinstance(audio_data, dict):
            raise AudioNotFoundError(audio_id)
        audio = Audio.from_dict(audio_data)

        steps: list[tuple[str, Callable[[], Awaitable[None]]]] = [
            (STEP_PROJECT, lambda: self.kv.delete(project_key(project_id))),
            (STEP_AUDIO_RECORD, lambda: self.kv.delete(audio_key(audio_id))),
            (STEP_AUDIO_BLOB, lambda: self.blobs.delete(audio_blob_key(audio_id))),
        ]
        if audio.cover_art is not None:
            cover_key = audio.cover_art.blob_key
            steps.append((STEP_COVER_BLOB, lambda: self.blobs.delete(cover_key)))

        result = DeleteResult(project_id=project_id)
        for name, step in steps:
            try:
                await step()
            except Exception as exc:
                logger.exception(
                    "Cascade delete of project %s failed at %s after removing %s",
                    project_id,
                    name,
                    result.removed,
                )
                raise CascadeDeleteError(project_id, list(result.removed), name) from exc
            result.removed.append(name)

        logger.info("Deleted project %s (%s)", project_id, ", ".join(result.removed))
        return result
