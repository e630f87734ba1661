"""
Shared fixtures for IndexDrift tests.
"""
import copy
import json

import pytest


HOTELS_INDEX = {
    "name": "hotels",
    "fields": [
        {"name": "HotelId", "type": "Edm.String", "key": True},
        {"name": "HotelName", "type": "Edm.String"},
    ],
}


@pytest.fixture
def hotels_index():
    return copy.deepcopy(HOTELS_INDEX)


@pytest.fixture
def write_json(tmp_path):
    """Write a document to tmp_path and return the file path as a string."""

    def _write(filename, document):
        path = tmp_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def snapshot_dir(tmp_path):
    directory = tmp_path / "snapshots"
    directory.mkdir()
    return directory
