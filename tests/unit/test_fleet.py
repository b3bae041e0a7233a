"""
Tests for the start-all / stop-all / ids / status helpers.
"""

import pytest

from gaianode import fleet
from gaianode.runner import ExecError
from tests.conftest import FakeRunner


@pytest.fixture
def populated(home):
    for n in (103, 101, 102):
        (home / f"gaia-node-{n}").mkdir()
    return home


def test_start_all_in_order(populated, runner):
    started = fleet.start_all(populated, runner)

    assert [i.number for i in started] == [101, 102, 103]
    assert runner.subcommands() == ["start"] * 3
    assert runner.bases() == [str(populated / f"gaia-node-{n}") for n in (101, 102, 103)]


def test_stop_all(populated, runner):
    fleet.stop_all(populated, runner)
    assert runner.subcommands() == ["stop"] * 3


def test_start_all_stops_at_first_failure(populated):
    runner = FakeRunner(fail_when=lambda args: str(populated / "gaia-node-102") in args)

    with pytest.raises(ExecError):
        fleet.start_all(populated, runner)

    assert len(runner.calls) == 2


def test_collect_ids(tmp_path):
    info_dir = tmp_path / "gaia-node-info"
    info_dir.mkdir()
    (info_dir / "node_info_102.txt").write_text("Node ID: 0xbbb\nDevice ID: dev-b\n")
    (info_dir / "node_info_101.txt").write_text("Node ID: 0xaaa\nDevice ID: dev-a\n")
    (info_dir / "notes.txt").write_text("Node ID: 0xignored\n")

    records = fleet.collect_ids(info_dir)

    assert [(r.number, r.node_id, r.device_id) for r in records] == [
        (101, "0xaaa", "dev-a"),
        (102, "0xbbb", "dev-b"),
    ]


def test_collect_ids_missing_dir(tmp_path):
    assert fleet.collect_ids(tmp_path / "absent") == []


def test_instance_status(populated, monkeypatch):
    monkeypatch.setattr(fleet, "listening_ports", lambda: {8201, 8203, 22})

    assert fleet.instance_status(populated) == {101: True, 102: False, 103: True}
