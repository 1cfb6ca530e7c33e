from __future__ import annotations

import json
import os

import pytest

from conftest import MIB, make_file
from diskweight.__main__ import main


def test_prints_tree_as_json(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("DISKWEIGHT_THRESHOLD", raising=False)
    make_file(tmp_path / "bigfile", 10 * MIB)
    make_file(tmp_path / "smallfile", 1024)

    assert main([str(tmp_path)]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out == {
        "name": str(tmp_path),
        "size": 10 * MIB,
        "children": [{"name": str(tmp_path / "bigfile"), "size": 10 * MIB, "children": []}],
    }


def test_threshold_flag(tmp_path, capsys):
    make_file(tmp_path / "smallfile", 1024)
    assert main([str(tmp_path), "--threshold", "1000"]) == 0
    assert json.loads(capsys.readouterr().out)["size"] == 1024


def test_bad_interval_exits_2(tmp_path, capsys):
    assert main([str(tmp_path), "--interval", "0"]) == 2
    assert "emit_interval" in capsys.readouterr().err


def test_undecodable_file_name_prints_valid_json(tmp_path, capfd):
    raw = os.path.join(os.fsencode(str(tmp_path)), b"bad\xff")
    try:
        with open(raw, "wb") as fh:
            fh.write(b"0123456789")
    except (OSError, ValueError):
        pytest.skip("filesystem rejects non-UTF-8 names")

    assert main([str(tmp_path), "--threshold", "0"]) == 0

    out = json.loads(capfd.readouterr().out)
    assert [c["name"] for c in out["children"]] == [str(tmp_path / "bad\ufffd")]
    assert out["size"] == 10
