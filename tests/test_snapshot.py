import json
import random

import pytest
from block_backend.allocator import AllocationStrategy
from block_backend.disk import VirtualDisk
from block_backend.errors import SnapshotError
from block_backend.snapshot import from_dict, load_snapshot, save_snapshot, to_dict

@pytest.fixture
def disk():
    d = VirtualDisk(16, 256, random.Random(3))
    d.create_file("a.txt", 600)
    d.create_file("b.bin", 700, AllocationStrategy.LINKED)
    d.create_file("c.idx", 300, AllocationStrategy.INDEXED)
    d.delete_file("a.txt")
    return d

class TestSaveLoad:
    def test_restores_files_and_partition(self, disk, tmp_path):
        path = tmp_path / "disk.json"
        save_snapshot(disk, str(path))

        loaded = load_snapshot(str(path))

        assert loaded.total_blocks == 16
        assert loaded.block_size == 256
        assert {f.id: (f.size, f.blocks, f.allocation) for f in loaded.files} == \
               {f.id: (f.size, f.blocks, f.allocation) for f in disk.files}
        assert loaded.tracker.snapshot() == disk.tracker.snapshot()

    def test_written_layout(self, disk, tmp_path):
        path = tmp_path / "disk.json"
        save_snapshot(disk, str(path))
        data = json.loads(path.read_text())
        assert data['version'] == 1
        assert data['disk']['free_blocks'] == disk.tracker.free_blocks
        assert {f['allocation'] for f in data['files']} == {'linked', 'indexed'}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError):
            load_snapshot(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_snapshot(str(tmp_path / "missing.json"))

class TestValidation:
    def base(self):
        return {'version': 1, 'disk': {'total_blocks': 8, 'block_size': 100}, 'files': []}

    def test_free_list_recomputed_not_trusted(self, caplog):
        data = self.base()
        data['disk']['free_blocks'] = list(range(8))
        data['files'] = [{'id': 'a', 'size': 200, 'blocks': [2, 3], 'allocation': 'continuous'}]

        disk = from_dict(data)

        assert disk.tracker.free_blocks == [0, 1, 4, 5, 6, 7]
        assert "Stored free list disagrees" in caplog.text

    def test_block_claimed_twice(self):
        data = self.base()
        data['files'] = [
            {'id': 'a', 'size': 100, 'blocks': [1]},
            {'id': 'b', 'size': 100, 'blocks': [1]},
        ]
        with pytest.raises(SnapshotError):
            from_dict(data)

    def test_block_out_of_range(self):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 100, 'blocks': [8]}]
        with pytest.raises(SnapshotError):
            from_dict(data)

    def test_duplicate_file_id(self):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 0, 'blocks': []}, {'id': 'a', 'size': 0, 'blocks': []}]
        with pytest.raises(SnapshotError):
            from_dict(data)

    @pytest.mark.parametrize("disk_info", [
        {}, {'total_blocks': 0, 'block_size': 100}, {'total_blocks': 8, 'block_size': "100"},
        {'total_blocks': True, 'block_size': 100},
    ])
    def test_bad_geometry(self, disk_info):
        with pytest.raises(SnapshotError):
            from_dict({'version': 1, 'disk': disk_info})

    def test_missing_disk_section(self):
        with pytest.raises(SnapshotError):
            from_dict({'files': []})

    def test_unsupported_version(self):
        data = self.base()
        data['version'] = 2
        with pytest.raises(SnapshotError):
            from_dict(data)

    def test_unknown_allocation_defaults_to_continuous(self):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 100, 'blocks': [0], 'allocation': 'fat-chain'}]
        disk = from_dict(data)
        assert disk.get_file('a').allocation is AllocationStrategy.CONTINUOUS

    def test_non_integer_blocks(self):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 100, 'blocks': ["0"]}]
        with pytest.raises(SnapshotError):
            from_dict(data)

    @pytest.mark.parametrize("files", [5, "a.txt", {'id': 'a'}])
    def test_files_not_a_list(self, files):
        data = self.base()
        data['files'] = files
        with pytest.raises(SnapshotError, match="must be a list"):
            from_dict(data)

    @pytest.mark.parametrize("blocks", [5, "01", {'0': 1}])
    def test_blocks_not_a_list(self, blocks):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 100, 'blocks': blocks}]
        with pytest.raises(SnapshotError, match="must be a list"):
            from_dict(data)

    def test_free_list_not_a_list(self):
        data = self.base()
        data['disk']['free_blocks'] = 5
        with pytest.raises(SnapshotError):
            from_dict(data)

    def test_loaded_disk_is_usable(self):
        data = self.base()
        data['files'] = [{'id': 'a', 'size': 200, 'blocks': [6, 7], 'allocation': 'continuous'}]
        disk = from_dict(data, random.Random(0))
        assert disk.create_file('b', 500).blocks == [0, 1, 2, 3, 4]
        assert disk.compact() == {'moved_blocks': 2}
        # "a" slides down from 6,7 into the hole at 5
        assert disk.get_file('a').blocks == [5, 6]
        assert to_dict(disk)['disk']['free_blocks'] == [7]
