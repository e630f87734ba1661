"""
Tests for the IndexDrift HTTP API.
"""
import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.drift import get_drift_checker
from services.drift import DriftChecker
from services.remote import RemoteServiceError
from services.snapshots import DirectorySnapshotSource


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def snapshot_checker(snapshot_dir):
    checker = DriftChecker(DirectorySnapshotSource(str(snapshot_dir)))
    app.dependency_overrides[get_drift_checker] = lambda: checker
    return checker


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCompare:

    def test_identical(self, client, hotels_index):
        response = client.post("/api/compare", json={"local": hotels_index, "remote": hotels_index})
        body = response.json()

        assert response.status_code == 200
        assert body["exists"] is True
        assert body["has_differences"] is False
        assert body["changes"] == []
        assert body["local_hash"] == body["remote_hash"]

    def test_missing_remote(self, client, hotels_index):
        body = client.post("/api/compare", json={"local": hotels_index}).json()

        assert body["exists"] is False
        assert body["message"] == "resource does not exist remotely"
        assert body["changes"] == []

    def test_changes(self, client):
        response = client.post("/api/compare", json={
            "local": {"rating": "Edm.Double", "id": "1"},
            "remote": {"rating": "Edm.Int32"},
        })
        body = response.json()

        assert body["change_count"] == 2
        assert body["changes"][0]["path"] == "id"
        assert body["changes"][0]["change_type"] == "added"
        assert body["changes"][0]["value"] == "1"
        assert body["changes"][1]["from"] == "Edm.Int32"
        assert body["changes"][1]["to"] == "Edm.Double"
        assert body["lines"] == ["Added id: 1", "Changed rating:", "  From: Edm.Int32", "  To:   Edm.Double"]

    def test_unpaired_surrogates(self, client):
        response = client.post(
            "/api/compare",
            content='{"local": {"name": "\\ud800", "replicas": 2}, "remote": {"name": "\\ud800", "replicas": 1}}',
            headers={"Content-Type": "application/json"},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["lines"] == ["Changed replicas:", "  From: 1", "  To:   2"]
        assert body["local_hash"] != body["remote_hash"]

    def test_responses_escape_unpaired_surrogates(self):
        from api.main import EscapedJSONResponse

        assert EscapedJSONResponse({"name": "\ud800"}).body == b'{"name":"\\ud800"}'

    def test_compare_files_with_unpaired_surrogate(self, client):
        content = '{"name": "\\ud800"}'
        response = client.post("/api/compare/files", files={
            "local_file": ("hotels.json", content, "application/json"),
            "remote_file": ("remote.json", content, "application/json"),
        })

        assert response.status_code == 200
        assert response.json()["has_differences"] is False

    def test_compare_files(self, client, hotels_index):
        remote = dict(hotels_index, fields=hotels_index["fields"][:1])
        response = client.post("/api/compare/files", files={
            "local_file": ("hotels.json", json.dumps(hotels_index), "application/json"),
            "remote_file": ("remote.json", json.dumps(remote), "application/json"),
        })
        body = response.json()

        assert response.status_code == 200
        assert body["change_count"] == 1
        assert body["local_file"] == "hotels.json"
        assert "RESULT: 1 DIFFERENCE(S) FOUND" in body["report"]

    def test_compare_files_without_remote(self, client, hotels_index):
        response = client.post("/api/compare/files", files={
            "local_file": ("hotels.json", json.dumps(hotels_index), "application/json"),
        })
        body = response.json()

        assert body["exists"] is False
        assert body["remote_file"] is None
        assert "REMOTE DEFINITION MISSING" in body["report"]

    def test_compare_files_rejects_invalid_json(self, client):
        response = client.post("/api/compare/files", files={
            "local_file": ("hotels.json", "{broken", "application/json"),
        })
        assert response.status_code == 400

    def test_compare_files_rejects_non_json_name(self, client):
        response = client.post("/api/compare/files", files={
            "local_file": ("hotels.txt", "{}", "text/plain"),
        })
        assert response.status_code == 400

    def test_request_too_large(self, client, monkeypatch):
        from api import main

        monkeypatch.setattr(main.settings, "MAX_REQUEST_SIZE", 10)
        response = client.post("/api/compare", json={"local": {"name": "a long enough body"}})
        assert response.status_code == 413


class TestDrift:

    def test_missing_index(self, client, snapshot_checker, hotels_index):
        response = client.post("/api/drift", json={"definition": hotels_index})
        body = response.json()

        assert response.status_code == 200
        assert body["index_name"] == "hotels"
        assert body["exists"] is False

    def test_drifted_index(self, client, snapshot_checker, hotels_index):
        snapshot_checker.source.upsert({"name": "hotels", "fields": []})

        body = client.post("/api/drift", json={"definition": hotels_index}).json()

        assert body["has_differences"] is True
        assert [c["change_type"] for c in body["changes"]] == ["added", "added"]

    def test_index_name_override(self, client, snapshot_checker, hotels_index):
        snapshot_checker.source.upsert(dict(hotels_index, name="hotels-v2"))

        body = client.post("/api/drift", json={"definition": hotels_index, "index_name": "hotels-v2"}).json()

        assert body["index_name"] == "hotels-v2"
        assert body["exists"] is True
        assert body["has_differences"] is False

    def test_definition_without_name(self, client, snapshot_checker):
        response = client.post("/api/drift", json={"definition": {"fields": []}})
        assert response.status_code == 400

    @pytest.mark.parametrize("name", ["a/b", "..", "a\\b"])
    def test_path_like_index_name(self, client, snapshot_checker, name):
        response = client.post("/api/drift", json={"definition": {"name": name}})

        assert response.status_code == 400
        assert "Invalid index name" in response.json()["detail"]

    def test_remote_failure(self, client, hotels_index):
        source = MagicMock()
        source.fetch.side_effect = RemoteServiceError("down", status_code=503)
        app.dependency_overrides[get_drift_checker] = lambda: DriftChecker(source)

        response = client.post("/api/drift", json={"definition": hotels_index})
        assert response.status_code == 502

    def test_no_source_configured(self, client, monkeypatch, hotels_index):
        from services import snapshots

        monkeypatch.setattr(snapshots.settings, "SNAPSHOT_DIRECTORY", None)
        monkeypatch.setattr(snapshots.settings, "SEARCH_ENDPOINT", None)

        response = client.post("/api/drift", json={"definition": hotels_index})
        assert response.status_code == 503
