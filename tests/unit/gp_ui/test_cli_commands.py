"""CLI behavior tests using Typer's CliRunner."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import gp_ui.cli as cli
from gp_notify.persistence import JsonFileKeyValueStore, load_snapshot

pytestmark = pytest.mark.unit_ui


runner = CliRunner()


def _invoke(*args: str):
    return runner.invoke(cli.app, list(args))


@pytest.fixture
def store_file(tmp_path: Path) -> str:
    return str(tmp_path / "notifications.json")


def _persisted(store_file: str):
    return load_snapshot(JsonFileKeyValueStore(store_file), "gst-notifications")


def test_list_empty_store(store_file: str) -> None:
    result = _invoke("notifications", "list", "--store", store_file)
    assert result.exit_code == 0
    assert "No notifications" in result.stdout


def test_add_then_list(store_file: str) -> None:
    added = _invoke(
        "notifications", "add", "GSTIN Approved", "Your registration is live",
        "--type", "success", "--persistent", "--priority", "high", "--store", store_file,
    )
    assert added.exit_code == 0
    notification_id = added.stdout.strip()
    assert len(notification_id) == 32

    listed = _invoke("notifications", "list", "--store", store_file)
    assert listed.exit_code == 0
    assert "GSTIN Approved" in listed.stdout
    assert "1 unread" in listed.stdout
    assert notification_id[:8] in listed.stdout


def test_expired_transient_entry_is_gone_on_next_command(store_file: str) -> None:
    _invoke("notifications", "add", "Saved", "draft", "--duration-ms", "0", "--store", store_file)
    result = _invoke("notifications", "list", "--store", store_file)
    assert "No notifications" in result.stdout
    assert _persisted(store_file) == []


def test_read_by_prefix_and_all(store_file: str) -> None:
    first = _invoke("notifications", "add", "A", "a", "--persistent", "--store", store_file).stdout.strip()
    _invoke("notifications", "add", "B", "b", "--persistent", "--store", store_file)

    result = _invoke("notifications", "read", first[:10], "--store", store_file)
    assert result.exit_code == 0
    assert "1 unread" in result.stdout

    result = _invoke("notifications", "read", "--all", "--store", store_file)
    assert "0 unread" in result.stdout
    assert all(n.read for n in _persisted(store_file))


def test_read_without_target_fails(store_file: str) -> None:
    result = _invoke("notifications", "read", "--store", store_file)
    assert result.exit_code == 1


def test_remove_and_clear(store_file: str) -> None:
    first = _invoke("notifications", "add", "A", "a", "--persistent", "--store", store_file).stdout.strip()
    _invoke("notifications", "add", "B", "b", "--persistent", "--store", store_file)

    result = _invoke("notifications", "remove", first, "--store", store_file)
    assert "1 remaining" in result.stdout
    assert [n.title for n in _persisted(store_file)] == ["B"]

    result = _invoke("notifications", "clear", "--store", store_file)
    assert "Cleared" in result.stdout
    assert _persisted(store_file) == []


def _seed(store_file: str, *ids: str) -> None:
    entries = [
        {
            "id": notification_id,
            "type": "info",
            "title": notification_id,
            "message": "m",
            "timestamp": "2024-01-01T00:00:00+00:00",
            "persistent": True,
        }
        for notification_id in ids
    ]
    JsonFileKeyValueStore(store_file).set("gst-notifications", json.dumps(entries))


@pytest.mark.parametrize("command", ["read", "remove"])
def test_unknown_id_fails_without_changes(store_file: str, command: str) -> None:
    _seed(store_file, "abc1", "abd2")

    result = _invoke("notifications", command, "zzz", "--store", store_file)

    assert result.exit_code == 1
    assert "No notification matches 'zzz'" in result.stdout
    assert [(n.id, n.read) for n in _persisted(store_file)] == [("abc1", False), ("abd2", False)]


@pytest.mark.parametrize("command", ["read", "remove"])
def test_ambiguous_prefix_fails_without_changes(store_file: str, command: str) -> None:
    _seed(store_file, "abc1", "abd2")

    result = _invoke("notifications", command, "ab", "--store", store_file)

    assert result.exit_code == 1
    assert "matches 2 notifications" in result.stdout
    assert len(_persisted(store_file)) == 2
    assert not any(n.read for n in _persisted(store_file))


def test_full_id_wins_over_longer_ids_sharing_it(store_file: str) -> None:
    _seed(store_file, "abc", "abcd")

    result = _invoke("notifications", "remove", "abc", "--store", store_file)

    assert result.exit_code == 0
    assert [n.id for n in _persisted(store_file)] == ["abcd"]


def test_perf_sample_without_probe(tmp_path: Path) -> None:
    export = tmp_path / "history.json"
    result = _invoke(
        "perf", "sample", "--no-probe", "--count", "2", "--interval", "0", "--export", str(export),
    )
    assert result.exit_code == 0, result.stdout
    assert "memory_usage" in result.stdout
    assert "Score:" in result.stdout
    assert export.exists()
