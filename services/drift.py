"""
Drift checking for IndexDrift.

Ties a definition to a snapshot source: fetch the remote definition by
name, compare it with the local one, and optionally push the local one.
"""
import logging

from config import settings
from core import compare_documents, ChangeReport, ParsedDefinition
from services.snapshots import SnapshotSource

logger = logging.getLogger(__name__)


class DriftChecker:
    """Compares local definitions against a snapshot source."""

    def __init__(self, source: SnapshotSource):
        self.source = source

    def check(self, definition: ParsedDefinition) -> ChangeReport:
        remote = self.source.fetch(definition.name)
        report = compare_documents(
            definition.document,
            remote,
            max_depth=settings.MAX_DOCUMENT_DEPTH
        )

        if not report.exists:
            logger.info(f"Index '{definition.name}': {report.message}")
        elif report.has_differences:
            logger.warning(f"Index '{definition.name}' drifted: {report.change_count} difference(s)")
        else:
            logger.info(f"Index '{definition.name}' matches remote definition")

        return report

    def apply(self, definition: ParsedDefinition) -> ChangeReport:
        """
        Push the local definition when it differs from the remote one.

        Returns the report computed before the write. When the remote
        already matches, nothing is written.
        """
        report = self.check(definition)

        if report.exists and not report.has_differences:
            logger.info(f"Index '{definition.name}' is already up to date")
            return report

        self.source.upsert(definition.document)
        return report
