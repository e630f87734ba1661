"""
Services package for IndexDrift.
Snapshot sources, drift checking and the definition watcher.
"""
from services.remote import SearchServiceClient, RemoteServiceError
from services.snapshots import DirectorySnapshotSource, SnapshotSource, build_snapshot_source
from services.drift import DriftChecker
from services.watcher import DefinitionWatcher, DefinitionFileHandler, DriftWatchService

__all__ = [
    "SearchServiceClient",
    "RemoteServiceError",
    "DirectorySnapshotSource",
    "SnapshotSource",
    "build_snapshot_source",
    "DriftChecker",
    "DefinitionWatcher",
    "DefinitionFileHandler",
    "DriftWatchService",
]
