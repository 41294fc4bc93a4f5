# tests/services/test_snapshot_script.py
"""Tests for the snapshot export/import command."""

import json

from codeshare.schemas import PostCreate
from codeshare.scripts.snapshot import export_snapshot, import_snapshot, main
from codeshare.services.engine import EngagementEngine
from codeshare.services.store import JsonFileSnapshotStore


def _seed(engine: EngagementEngine) -> None:
    post = engine.create_post(PostCreate(title="One", code="a", author="A"))
    engine.create_post(PostCreate(title="Two", code="b", author="A"))
    engine.add_comment(post.id, "Bob", "nice", "10.0.0.1")
    engine.toggle_like(post.id, "10.0.0.1")


def test_export_then_import_into_file_store(board, tmp_path) -> None:
    """Moving the board between backends keeps posts and engagement."""
    _seed(board)
    dump = tmp_path / "board.json"

    export_snapshot(board.store, dump)
    target = JsonFileSnapshotStore(tmp_path / "copy.json")
    imported = import_snapshot(target, dump)

    assert [post.title for post in imported.posts] == ["One", "Two"]
    assert imported.likes == {1: ["10.0.0.1"]}
    assert imported.comments[1][0].visitor_id == "10.0.0.1"
    assert (imported.last_post_id, imported.last_comment_id) == (2, 1)


def test_import_replaces_existing_board(board, tmp_path) -> None:
    _seed(board)
    dump = tmp_path / "board.json"
    export_snapshot(board.store, dump)
    board.clear_all()
    board.create_post(PostCreate(title="Other", code="x", author="A"))

    import_snapshot(board.store, dump)

    assert [post.title for post in board.list_posts()] == ["Two", "One"]


def test_import_export_bundle_rebuilds_counters(board, tmp_path) -> None:
    """Bundles carry no counters, so they are derived from the highest ids."""
    _seed(board)
    bundle = tmp_path / "export.json"
    bundle.write_text(json.dumps(board.export_all().to_payload()), encoding="utf-8")
    target = JsonFileSnapshotStore(tmp_path / "fresh.json")

    import_snapshot(target, bundle)
    engine = EngagementEngine(target)
    created = engine.create_post(PostCreate(title="Three", code="c", author="A"))
    comment = engine.add_comment(created.id, "Eve", "hi", "10.0.0.2")

    assert created.id == 3
    assert comment.id == 2


def test_main_round_trip_with_file_backend(tmp_path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(
        "codeshare.services.store.settings.store_path", str(tmp_path / "database.json")
    )
    source = tmp_path / "in.json"
    source.write_text(
        json.dumps(
            {
                "posts": [
                    {
                        "id": 4,
                        "title": "Imported",
                        "description": "d",
                        "author": "A",
                        "language": "python",
                        "tags": ["code"],
                        "code": "pass",
                        "createdAt": "2024-01-01T00:00:00Z",
                        "updatedAt": "2024-01-01T00:00:00Z",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    assert main(["import", str(source), "--backend", "file"]) == 0
    assert main(["export", str(tmp_path / "out.json"), "--backend", "file"]) == 0

    exported = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
    assert exported["lastPostId"] == 4
    assert exported["posts"][0]["title"] == "Imported"
    assert "Imported 1 post(s)" in capsys.readouterr().out
