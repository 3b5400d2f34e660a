import json
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from project_api.app import create_app
from project_api.config import Settings
from project_api.dependencies import get_blob_store, get_kv_store, get_project_service
from project_api.kv import InMemoryKeyValueStore
from project_api.service import ProjectService
from project_api.storage import InMemoryBlobStore


class FailingBlobStore(InMemoryBlobStore):
    async def delete(self, object_key):
        raise RuntimeError("bucket unreachable")


class ProjectApiTests(unittest.TestCase):
    def setUp(self):
        self.kv = InMemoryKeyValueStore()
        self.blobs = InMemoryBlobStore()
        self.app = create_app()
        self.app.dependency_overrides[get_kv_store] = lambda: self.kv
        self.app.dependency_overrides[get_blob_store] = lambda: self.blobs
        self.client = TestClient(self.app)

    def _create(self, name="Demo", audio_id="audio-1"):
        response = self.client.post("/project", json={"name": name, "audioId": audio_id})
        self.assertEqual(response.status_code, 200)
        return response.json()["id"]

    def _store_audio(self, audio_id="audio-1"):
        self.kv.items[f"audio:{audio_id}"] = json.dumps(
            {"id": audio_id, "coverArt": {"id": "cover-1", "format": "image/png"}}
        )
        self.blobs.stored_objects[f"{audio_id}.mp3"] = b"mp3"
        self.blobs.stored_objects["cover-1.png"] = b"png"

    def test_create_then_get(self):
        response = self.client.post("/project", json={"name": "Demo", "audioId": "audio-1"})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["message"], "Project created")

        fetched = self.client.get(f"/project/{payload['id']}")
        self.assertEqual(fetched.status_code, 200)
        project = fetched.json()
        self.assertEqual(project["id"], payload["id"])
        self.assertEqual(project["name"], "Demo")
        self.assertEqual(project["audioId"], "audio-1")
        self.assertEqual(project["createdAt"], project["updatedAt"])

    def test_create_requires_name_and_audio_id(self):
        response = self.client.post("/project", json={"name": "Demo"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.kv.items, {})

    def test_list_empty(self):
        response = self.client.get("/projects")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"projects": []})

    def test_list_returns_projects(self):
        first = self._create("One")
        second = self._create("Two")
        response = self.client.get("/projects")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(sorted(p["id"] for p in response.json()), sorted([first, second]))

    def test_update_preserves_identity_and_advances_updated_at(self):
        project_id = self._create()
        before = self.client.get(f"/project/{project_id}").json()

        response = self.client.put(f"/project/{project_id}", json={"description": "x"})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["message"], "Project updated")
        after = payload["project"]
        for key in ("id", "name", "audioId", "createdAt"):
            self.assertEqual(after[key], before[key])
        self.assertEqual(after["description"], "x")
        self.assertGreater(after["updatedAt"], before["updatedAt"])
        self.assertEqual(self.client.get(f"/project/{project_id}").json(), after)

    def test_update_with_lyrics_creates_separate_record(self):
        project_id = self._create()
        response = self.client.put(
            f"/project/{project_id}",
            json={
                "name": "Renamed",
                "lyrics": {"text": "hello world", "lines": [{"id": "l1", "text": "hello world"}]},
            },
        )
        self.assertEqual(response.status_code, 200)
        project = response.json()["project"]
        self.assertNotIn("lyrics", project)
        self.assertNotIn("lyricsId", project)

        stored_project = json.loads(self.kv.items[f"project:{project_id}"])
        self.assertNotIn("lyrics", stored_project)

        lyrics_keys = [key for key in self.kv.items if key.startswith("lyrics:")]
        self.assertEqual(len(lyrics_keys), 1)
        lyrics = json.loads(self.kv.items[lyrics_keys[0]])
        self.assertEqual(lyrics_keys[0], f"lyrics:{lyrics['id']}")
        self.assertNotEqual(lyrics["id"], project_id)
        self.assertEqual(lyrics["projectId"], project_id)
        self.assertEqual(lyrics["text"], "hello world")
        self.assertEqual(lyrics["lines"], [{"id": "l1", "text": "hello world"}])

    def test_update_rejects_wrongly_typed_field(self):
        project_id = self._create()
        response = self.client.put(f"/project/{project_id}", json={"assetIds": "not-a-list"})
        self.assertEqual(response.status_code, 422)

    def test_update_keeps_unchanged_fields_verbatim(self):
        project_id = self._create()
        key = f"project:{project_id}"
        record = json.loads(self.kv.items[key])
        record["bpm"] = 120
        record["assetIds"] = ["asset-1", "asset-2"]
        self.kv.items[key] = json.dumps(record)

        self.client.put(f"/project/{project_id}", json={"description": "x"})

        stored = self.kv.items[key]
        reloaded = json.loads(stored)
        self.assertEqual(json.dumps(reloaded), stored)
        self.assertEqual(reloaded["bpm"], 120)
        self.assertEqual(reloaded["assetIds"], ["asset-1", "asset-2"])

    def test_missing_project_is_plain_text_404(self):
        for method in ("get", "put", "delete"):
            kwargs = {"json": {"name": "x"}} if method == "put" else {}
            response = getattr(self.client, method)("/project/does-not-exist", **kwargs)
            self.assertEqual(response.status_code, 404, method)
            self.assertEqual(response.text, "Project not found")
            self.assertTrue(response.headers["content-type"].startswith("text/plain"))

    def test_update_missing_project_checked_before_body(self):
        for kwargs in ({}, {"json": {"assetIds": "not-a-list"}}, {"content": b"{not json"}):
            response = self.client.put("/project/does-not-exist", **kwargs)
            self.assertEqual(response.status_code, 404, kwargs)
            self.assertEqual(response.text, "Project not found")

    def test_update_existing_project_with_empty_body(self):
        project_id = self._create()
        response = self.client.put(f"/project/{project_id}")
        self.assertEqual(response.status_code, 422)

    def test_cascade_delete_removes_audio_and_blobs(self):
        self._store_audio()
        project_id = self._create()

        response = self.client.delete(f"/project/{project_id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "message": "Project deleted",
                "id": project_id,
                "removed": ["project", "audio_record", "audio_blob", "cover_blob"],
            },
        )
        self.assertEqual(self.kv.items, {})
        self.assertEqual(self.blobs.stored_objects, {})
        self.assertEqual(self.client.get(f"/project/{project_id}").status_code, 404)

    def test_cascade_delete_missing_audio(self):
        project_id = self._create(audio_id="gone")
        response = self.client.delete(f"/project/{project_id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, "Audio not found")
        self.assertEqual(self.client.get(f"/project/{project_id}").status_code, 200)

    def test_cascade_delete_malformed_audio_record(self):
        project_id = self._create()
        self.kv.items["audio:audio-1"] = "[]"
        response = self.client.delete(f"/project/{project_id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, "Audio not found")

    def test_cascade_delete_partial_failure(self):
        self._store_audio()
        self.app.dependency_overrides[get_blob_store] = lambda: FailingBlobStore()
        project_id = self._create()

        response = self.client.delete(f"/project/{project_id}")

        self.assertEqual(response.status_code, 500)
        payload = response.json()
        self.assertEqual(payload["id"], project_id)
        self.assertEqual(payload["removed"], ["project", "audio_record"])
        self.assertEqual(payload["failed"], "audio_blob")
        self.assertNotIn(f"project:{project_id}", self.kv.items)

    def test_minimal_delete(self):
        self.app.dependency_overrides[get_project_service] = lambda: ProjectService(
            self.kv, self.blobs, cascade_delete=False
        )
        project_id = self._create(audio_id="never-stored")
        response = self.client.delete(f"/project/{project_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["removed"], ["project"])
        self.assertEqual(self.kv.items, {})

    @patch("project_api.dependencies.get_settings")
    def test_delete_mode_follows_settings(self, mock_settings):
        mock_settings.return_value = Settings(cascade_delete=False)
        project_id = self._create(audio_id="never-stored")
        response = self.client.delete(f"/project/{project_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["removed"], ["project"])

    def test_cors_allows_any_origin(self):
        response = self.client.get("/projects", headers={"Origin": "https://studio.example"})
        self.assertEqual(response.headers["access-control-allow-origin"], "*")


if __name__ == "__main__":
    unittest.main()
