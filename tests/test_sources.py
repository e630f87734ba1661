"""
Tests for snapshot sources: the search service client and the snapshot directory.
"""
import json

import httpx
import pytest

from core.file_parser import DefinitionError
from services import snapshots
from services.remote import RemoteServiceError, SearchServiceClient, strip_service_metadata
from services.snapshots import DirectorySnapshotSource, build_snapshot_source

ENDPOINT = "https://example.search.windows.net"


def _client(handler) -> SearchServiceClient:
    return SearchServiceClient(ENDPOINT, "secret", transport=httpx.MockTransport(handler))


class TestSearchServiceClient:

    def test_fetch_returns_definition(self, hotels_index):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["api_version"] = request.url.params.get("api-version")
            seen["api_key"] = request.headers.get("api-key")
            body = {"@odata.context": "ctx", "@odata.etag": "\"0x1\"", **hotels_index}
            return httpx.Response(200, json=body)

        with _client(handler) as client:
            remote = client.fetch("hotels")

        assert remote == hotels_index
        assert seen["path"] == "/indexes('hotels')"
        assert seen["api_version"] == "2023-11-01"
        assert seen["api_key"] == "secret"

    def test_fetch_missing_index_returns_none(self):
        client = _client(lambda request: httpx.Response(404, json={"error": {"code": "NotFound"}}))
        assert client.fetch("hotels") is None

    def test_fetch_server_error_raises(self):
        client = _client(lambda request: httpx.Response(503, text="busy"))

        with pytest.raises(RemoteServiceError) as exc_info:
            client.fetch("hotels")
        assert exc_info.value.status_code == 503

    def test_fetch_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteServiceError, match="Could not reach"):
            _client(handler).fetch("hotels")

    def test_upsert_puts_definition(self, hotels_index):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json=hotels_index)

        _client(handler).upsert(hotels_index)

        assert seen["method"] == "PUT"
        assert seen["path"] == "/indexes('hotels')"
        assert seen["body"] == hotels_index

    def test_upsert_rejected(self, hotels_index):
        client = _client(lambda request: httpx.Response(400, text="bad field"))

        with pytest.raises(RemoteServiceError, match="rejected") as exc_info:
            client.upsert(hotels_index)
        assert exc_info.value.status_code == 400

    def test_endpoint_required(self):
        with pytest.raises(ValueError):
            SearchServiceClient("")

    def test_strip_service_metadata_only_touches_objects(self):
        assert strip_service_metadata({"@odata.etag": "x", "name": "a"}) == {"name": "a"}
        assert strip_service_metadata([1]) == [1]


class TestDirectorySnapshotSource:

    def test_fetch_missing_returns_none(self, snapshot_dir):
        assert DirectorySnapshotSource(str(snapshot_dir)).fetch("hotels") is None

    def test_upsert_then_fetch(self, snapshot_dir, hotels_index):
        source = DirectorySnapshotSource(str(snapshot_dir))
        source.upsert(hotels_index)

        assert (snapshot_dir / "hotels.json").is_file()
        assert source.fetch("hotels") == hotels_index

    def test_invalid_snapshot_raises(self, snapshot_dir):
        (snapshot_dir / "hotels.json").write_text("{oops", encoding="utf-8")

        with pytest.raises(DefinitionError):
            DirectorySnapshotSource(str(snapshot_dir)).fetch("hotels")

    @pytest.mark.parametrize("name", ["../etc", "a/b", ".."])
    def test_rejects_path_like_names(self, snapshot_dir, name):
        with pytest.raises(DefinitionError, match="Invalid index name"):
            DirectorySnapshotSource(str(snapshot_dir)).fetch(name)


class TestBuildSnapshotSource:

    @pytest.fixture(autouse=True)
    def _clear_settings(self, monkeypatch):
        monkeypatch.setattr(snapshots.settings, "SNAPSHOT_DIRECTORY", None)
        monkeypatch.setattr(snapshots.settings, "SEARCH_ENDPOINT", None)
        monkeypatch.setattr(snapshots.settings, "SEARCH_API_KEY", None)

    def test_snapshot_dir_wins(self, snapshot_dir):
        source = build_snapshot_source(ENDPOINT, "key", str(snapshot_dir))
        assert isinstance(source, DirectorySnapshotSource)

    def test_endpoint(self):
        source = build_snapshot_source(ENDPOINT, "key")
        assert isinstance(source, SearchServiceClient)
        assert source.endpoint == ENDPOINT
        source.close()

    def test_falls_back_to_settings(self, monkeypatch, snapshot_dir):
        monkeypatch.setattr(snapshots.settings, "SNAPSHOT_DIRECTORY", str(snapshot_dir))
        assert isinstance(build_snapshot_source(), DirectorySnapshotSource)

    def test_nothing_configured(self):
        with pytest.raises(ValueError, match="endpoint or a snapshot directory"):
            build_snapshot_source()
