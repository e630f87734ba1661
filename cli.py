# IndexDrift v0.3.0
#!/usr/bin/env python3
"""
IndexDrift CLI

Command-line interface for comparing index definitions with their
remote counterparts and pushing updates.
"""
import argparse
import json
import logging
import sys
from typing import Optional

logger = logging.getLogger("indexdrift")


def _add_source_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--endpoint", "-e", help="The search service endpoint URL")
    parser.add_argument("--key", "-k", help="The search service admin API key")
    parser.add_argument("--snapshot-dir", help="Directory of <index-name>.json snapshots to use instead of the service")


def _add_definition_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--index-file", "-f", required=True, help="The path to the index definition JSON file")
    parser.add_argument(
        "--index-name", "-n",
        help="The name of the index (optional, defaults to name in JSON file)"
    )


def _open_source(args):
    from services import build_snapshot_source
    return build_snapshot_source(args.endpoint, args.key, args.snapshot_dir)


def _close_source(source):
    if hasattr(source, "close"):
        source.close()


def print_report(report, as_json: bool = False):
    """Print a ChangeReport in text or JSON form."""
    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
        return

    if not report.exists:
        print(report.message)
        return

    if not report.has_differences:
        print("Index definitions are identical.")
        return

    print(report.message)
    for line in report.lines():
        print(line)


def diff_index(args) -> int:
    """Compare a local definition with the remote one."""
    from core import parse_definition_file
    from services import DriftChecker

    definition = parse_definition_file(args.index_file, args.index_name)
    source = _open_source(args)
    try:
        report = DriftChecker(source).check(definition)
    finally:
        _close_source(source)

    print_report(report, args.json)
    return 0


def compare_files(local_path: str, remote_path: str, as_json: bool = False) -> int:
    """Compare two JSON files and print differences."""
    from core import compare_documents, load_json_file
    from config import settings

    local = load_json_file(local_path)
    remote = load_json_file(remote_path)

    report = compare_documents(local, remote, max_depth=settings.MAX_DOCUMENT_DEPTH)
    print_report(report, as_json)
    return 0


def update_index(args) -> int:
    """Create or update the remote index from a local definition."""
    from core import parse_definition_file
    from services import DriftChecker

    definition = parse_definition_file(args.index_file, args.index_name)
    source = _open_source(args)
    try:
        report = DriftChecker(source).apply(definition)
    finally:
        _close_source(source)

    if report.exists and not report.has_differences:
        print(f"Index '{definition.name}' is already up to date")
    else:
        print(f"Successfully created/updated index '{definition.name}'")
    return 0


def watch_directory(args) -> int:
    """Watch a directory of definitions and report drift as files change."""
    from services import DriftChecker, DriftWatchService
    import time

    def on_report(definition, report):
        print(f"[{definition.name}] {definition.filename}")
        print_report(report)
        print()

    source = _open_source(args)
    service = DriftWatchService(DriftChecker(source), on_report=on_report)

    print(f"Watching directory: {args.path}")
    print("Press Ctrl+C to stop\n")

    try:
        service.start(args.path)
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping watcher...")
    finally:
        service.stop()
        _close_source(source)
    return 0


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False, workers: int = 1) -> int:
    """Run the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers if not reload else 1  # reload mode requires single worker
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexdrift",
        description="Search index definition drift detection",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # diff
    diff_parser = subparsers.add_parser("diff", help="Compare local index definition with the remote one")
    _add_definition_arguments(diff_parser)
    _add_source_arguments(diff_parser)
    diff_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare two JSON files")
    compare_parser.add_argument("local", help="Local/desired file")
    compare_parser.add_argument("remote", help="Remote/current file")
    compare_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    # update
    update_parser = subparsers.add_parser("update", help="Create or update the remote index")
    _add_definition_arguments(update_parser)
    _add_source_arguments(update_parser)

    # watch
    watch_parser = subparsers.add_parser("watch", help="Watch a directory of definitions for drift")
    watch_parser.add_argument("path", help="Directory to watch")
    _add_source_arguments(watch_parser)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.add_argument("--workers", type=int, default=1, help="Number of worker processes")

    return parser


def main(argv: Optional[list] = None) -> int:
    from config import settings
    from core import DefinitionError, NodeStructureError
    from services import RemoteServiceError

    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "diff":
            return diff_index(args)
        elif args.command == "compare":
            return compare_files(args.local, args.remote, args.json)
        elif args.command == "update":
            return update_index(args)
        elif args.command == "watch":
            return watch_directory(args)
        elif args.command == "serve":
            return run_server(args.host, args.port, args.reload, args.workers)
    except (DefinitionError, NodeStructureError, RemoteServiceError, ValueError, FileNotFoundError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
