# src/codeshare/scripts/snapshot.py
"""Copy the board document between stores.

Usage:
    python -m codeshare.scripts.snapshot export board.json
    python -m codeshare.scripts.snapshot import database.json

``import`` accepts both a store document and an export bundle, and replaces
whatever the configured store currently holds.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from codeshare.schemas import Snapshot
from codeshare.services.store import SnapshotStore, build_store


def export_snapshot(store: SnapshotStore, target: Path) -> Snapshot:
    """Write the store's current document to ``target``."""
    snapshot = store.load()
    target.write_text(json.dumps(snapshot.to_document(), indent=2), encoding="utf-8")
    return snapshot


def import_snapshot(store: SnapshotStore, source: Path) -> Snapshot:
    """Replace the store's document with the one read from ``source``.

    Counters missing from an export bundle are rebuilt from the highest ids
    present so new posts and comments never reuse an id.
    """
    document = json.loads(source.read_text(encoding="utf-8"))
    incoming = Snapshot.from_document(document)
    incoming.last_post_id = max(
        [incoming.last_post_id, *(post.id for post in incoming.posts)]
    )
    incoming.last_comment_id = max(
        [
            incoming.last_comment_id,
            *(comment.id for items in incoming.comments.values() for comment in items),
        ]
    )
    current = store.load()
    incoming.version = current.version
    return store.save(incoming)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("action", choices=["export", "import"])
    parser.add_argument("path", type=Path)
    parser.add_argument(
        "--backend",
        choices=["database", "file"],
        default=None,
        help="Store to use (defaults to STORE_BACKEND)",
    )
    args = parser.parse_args(argv)

    store = build_store(args.backend)
    if args.action == "export":
        snapshot = export_snapshot(store, args.path)
        print(f"Exported {len(snapshot.posts)} post(s) to {args.path}")
    else:
        snapshot = import_snapshot(store, args.path)
        print(f"Imported {len(snapshot.posts)} post(s) from {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
