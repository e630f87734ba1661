"""
Snapshot sources for IndexDrift.

A snapshot source returns the remote definition of an index by name, or
None when the index does not exist. Two are provided: the search service
client and a directory of <index-name>.json files (useful offline and in CI).
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from config import settings
from core.file_parser import DefinitionError, load_json_file
from services.remote import SearchServiceClient

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    def fetch(self, name: str) -> Optional[Any]:
        ...

    def upsert(self, document: dict) -> None:
        ...


class DirectorySnapshotSource:
    """Reads and writes index snapshots stored as JSON files in a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _snapshot_path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise DefinitionError(f"Invalid index name: {name!r}")
        return self.directory / f"{name}.json"

    def fetch(self, name: str) -> Optional[Any]:
        path = self._snapshot_path(name)
        if not path.is_file():
            logger.info(f"No snapshot for index '{name}' in {self.directory}")
            return None

        return load_json_file(str(path))

    def upsert(self, document: dict):
        name = document.get("name")
        if not name:
            raise DefinitionError("Index name is required in the JSON definition")

        path = self._snapshot_path(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2, sort_keys=True)
            f.write("\n")

        logger.info(f"Wrote snapshot for index '{name}' to {path}")


def build_snapshot_source(
    endpoint: Optional[str] = None,
    api_key: Optional[str] = None,
    snapshot_dir: Optional[str] = None
) -> SnapshotSource:
    """
    Pick the snapshot source from explicit arguments, falling back to settings.

    A snapshot directory takes precedence over a service endpoint.
    """
    snapshot_dir = snapshot_dir or settings.SNAPSHOT_DIRECTORY
    if snapshot_dir:
        return DirectorySnapshotSource(snapshot_dir)

    endpoint = endpoint or settings.SEARCH_ENDPOINT
    if endpoint:
        return SearchServiceClient(
            endpoint,
            api_key or settings.SEARCH_API_KEY,
            api_version=settings.SEARCH_API_VERSION,
            timeout=settings.REQUEST_TIMEOUT
        )

    raise ValueError("A search service endpoint or a snapshot directory is required")
