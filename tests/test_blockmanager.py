import json

import pytest
from blockmanager import main

@pytest.fixture
def workdir(tmp_path, monkeypatch):
    # Log file lands in the temp dir
    monkeypatch.chdir(tmp_path)
    return tmp_path

@pytest.fixture
def snapshot(workdir):
    path = workdir / "disk.json"
    assert main(["new", str(path), "--blocks", "10", "--block-size", "100"]) == 0
    return path

class TestSchedule:
    def test_fcfs_output(self, workdir, capsys):
        code = main(["schedule", "fcfs", "53", "98", "183", "37", "122", "14", "124", "65", "67"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Total movement:  640" in out
        assert "53 -> 98 -> 183" in out

    def test_scan_marks_boundary(self, workdir, capsys):
        main(["schedule", "SCAN", "53", "98", "183", "37", "122", "14", "124", "65", "67",
              "--max-block", "199", "--direction", "up"])
        out = capsys.readouterr().out
        assert "Total movement:  331" in out
        assert "(boundary)" in out

    def test_unknown_policy(self, workdir, capsys):
        assert main(["schedule", "elevator", "10", "20"]) == 1
        assert "Error:" in capsys.readouterr().out

class TestSnapshotCommands:
    def test_new_from_format(self, workdir):
        path = workdir / "small.json"
        assert main(["new", str(path), "--format", "small"]) == 0
        data = json.loads(path.read_text())
        assert data['disk']['total_blocks'] == 100
        assert data['disk']['block_size'] == 512

    @pytest.mark.parametrize("size", ["0", "-512"])
    def test_new_rejects_bad_block_size(self, workdir, capsys, size):
        path = workdir / "bad.json"
        assert main(["new", str(path), "--blocks", "10", "--block-size", size]) == 1
        assert "Error:" in capsys.readouterr().out
        assert not path.exists()

    def test_new_default_block_size(self, workdir):
        path = workdir / "plain.json"
        assert main(["new", str(path), "--blocks", "10"]) == 0
        assert json.loads(path.read_text())['disk']['block_size'] == 4096

    def test_create_delete_compact(self, snapshot, capsys):
        assert main(["create", str(snapshot), "a", "300"]) == 0
        assert main(["create", str(snapshot), "b", "200", "--strategy", "linked", "--seed", "1"]) == 0
        assert main(["delete", str(snapshot), "a"]) == 0
        assert main(["compact", str(snapshot)]) == 0

        data = json.loads(snapshot.read_text())
        assert [f['id'] for f in data['files']] == ["b"]
        assert sorted(data['files'][0]['blocks']) == [0, 1]
        assert "Moved" in capsys.readouterr().out

    def test_contiguous_failure_reported(self, snapshot, capsys):
        main(["create", str(snapshot), "first", "400"])
        main(["create", str(snapshot), "second", "300"])
        main(["delete", str(snapshot), "first"])
        before = snapshot.read_text()

        assert main(["create", str(snapshot), "third", "500"]) == 1
        assert "Error:" in capsys.readouterr().out
        assert snapshot.read_text() == before

    def test_status(self, snapshot, capsys):
        main(["create", str(snapshot), "a", "250", "--strategy", "indexed"])
        capsys.readouterr()
        assert main(["status", str(snapshot)]) == 0
        out = capsys.readouterr().out
        assert "Used / free:     4 / 6" in out
        assert "indexed" in out

    def test_missing_snapshot(self, workdir, capsys):
        assert main(["status", str(workdir / "nope.json")]) == 1
