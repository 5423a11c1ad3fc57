"""flatfs CLI - inspect and manipulate a flat object store through filesystem paths.

Usage:
    python -m flatfs translate URI [--no-fold]
    python -m flatfs ls URI [--prefix] [--recursive]
    python -m flatfs stat URI
    python -m flatfs mkdir URI
    python -m flatfs put URI FILE
    python -m flatfs cat URI
    python -m flatfs rm URI

URIs have the form scheme://<container>.<service>/<object name>; the scheme
selects the backing store ("localfs" persists under
FLATFS_OBJECT_STORE_BASE_DIR, "mem" lives for one process).

Exit codes:
    0: Success
    1: Internal error (unexpected)
    2: Object not found / malformed path / invalid configuration
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from flatfs.errors import FlatFsConfigError, MalformedPathError, NotFoundError
from flatfs.filesystem import ObjectStoreFileSystem
from flatfs.observability.tracing import configure_tracing
from flatfs.store.models import ObjectStatus
from flatfs.uri import parse_filesystem_uri


def _output_json(data: Any) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _make_error_result(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}, "ok": False}


def _status_to_dict(status: ObjectStatus) -> dict[str, Any]:
    return {
        "content_type": status.content_type,
        "is_directory_marker": status.is_directory_marker,
        "key": status.key,
        "path": status.path,
        "size_bytes": status.size_bytes,
    }


def _open_filesystem(uri: str) -> ObjectStoreFileSystem:
    fs = ObjectStoreFileSystem()
    fs.initialize(parse_filesystem_uri(uri).uri)
    return fs


def cmd_translate(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    key = fs.translator.translate(args.uri, fold_attempt_id=not args.no_fold)
    _output_json({"key": key, "ok": True, "path": args.uri})
    return 0


def cmd_ls(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    entries = fs.list_status(args.uri, recursive=args.recursive, prefix_based=args.prefix)
    _output_json({"entries": [_status_to_dict(e) for e in entries], "ok": True})
    return 0


def cmd_stat(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    _output_json({"ok": True, "status": _status_to_dict(fs.get_status(args.uri))})
    return 0


def cmd_mkdir(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    _output_json({"ok": fs.mkdirs(args.uri)})
    return 0


def cmd_put(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    data = sys.stdin.buffer.read() if args.file == "-" else Path(args.file).read_bytes()
    with fs.create(args.uri) as out:
        out.write(data)
    _output_json({"key": out.key, "ok": True, "size_bytes": len(data)})
    return 0


def cmd_cat(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    with fs.open(args.uri) as stream:
        sys.stdout.buffer.write(stream.read())
    sys.stdout.flush()
    return 0


def cmd_rm(args: argparse.Namespace) -> int:
    fs = _open_filesystem(args.uri)
    _output_json({"ok": fs.delete(args.uri, recursive=True)})
    return 0


COMMAND_DISPATCH = {
    "translate": cmd_translate,
    "ls": cmd_ls,
    "stat": cmd_stat,
    "mkdir": cmd_mkdir,
    "put": cmd_put,
    "cat": cmd_cat,
    "rm": cmd_rm,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="flatfs",
        description="flatfs - filesystem paths over flat object stores",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for diagnostics on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    translate_parser = subparsers.add_parser("translate", help="Show the object key of a path")
    translate_parser.add_argument("uri", metavar="URI")
    translate_parser.add_argument(
        "--no-fold",
        action="store_true",
        default=False,
        help="Do not fold the task attempt id into the key",
    )

    ls_parser = subparsers.add_parser("ls", help="List entries at a path")
    ls_parser.add_argument("uri", metavar="URI")
    ls_parser.add_argument(
        "--prefix",
        action="store_true",
        default=False,
        help="List by key prefix even if no object exists at the path",
    )
    ls_parser.add_argument(
        "--recursive",
        action="store_true",
        default=False,
        help="Include entries at any depth",
    )

    for name, description in [
        ("stat", "Show the status of one object"),
        ("mkdir", "Create a directory (marker only below a job scratch area)"),
        ("cat", "Write an object's content to stdout"),
        ("rm", "Delete a path and everything below it"),
    ]:
        sub = subparsers.add_parser(name, help=description)
        sub.add_argument("uri", metavar="URI")

    put_parser = subparsers.add_parser("put", help="Write a local file to a path")
    put_parser.add_argument("uri", metavar="URI")
    put_parser.add_argument("file", metavar="FILE", help="Local file, or - for stdin")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Internal error (unexpected)
        2: Not found / malformed path / invalid configuration
    """
    try:
        parser = create_parser()
        args = parser.parse_args(argv)
        logging.basicConfig(level=getattr(logging, args.log_level), stream=sys.stderr)
        configure_tracing()

        if args.command is None:
            parser.print_help()
            return 0

        return COMMAND_DISPATCH[args.command](args)

    except NotFoundError as e:
        _output_json(_make_error_result("NOT_FOUND", str(e)))
        return 2
    except MalformedPathError as e:
        _output_json(_make_error_result("MALFORMED_PATH", str(e)))
        return 2
    except FlatFsConfigError as e:
        _output_json(_make_error_result("INVALID_CONFIG", str(e)))
        return 2
    except Exception as e:
        # Fail-closed: unexpected errors return exit code 1
        _output_json(_make_error_result("INTERNAL_ERROR", str(e)))
        return 1


if __name__ == "__main__":
    sys.exit(main())
