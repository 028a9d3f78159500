import re

import pytest

from layeredfs.baymax import ChunkedFS

LOG_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (.*)$")


@pytest.fixture
def source(tmp_path):
    directory = tmp_path / "relics"
    directory.mkdir()
    return directory


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "activity.log"


@pytest.fixture
def fs(source, log_file):
    return ChunkedFS(source, log_file, chunk_size=4, max_chunks=1000)


def log_messages(log_file):
    messages = []
    for line in log_file.read_text().splitlines():
        match = LOG_LINE.match(line)
        assert match is not None
        messages.append(match.group(1))
    return messages


def test_chunk_path_format(fs, source):
    assert fs.chunk_path("relic", 7) == source / "relic.007"


def test_write_then_read_round_trip(fs):
    data = b"the quick brown fox"
    assert fs.write("/fox", data, 0) == len(data)
    assert fs.read("/fox", 100, 0) == data


def test_write_splits_into_chunks(fs, source):
    assert fs.write("/f", b"0123456789", 0) == 10
    assert sorted(p.name for p in source.iterdir()) == ["f.000", "f.001", "f.002"]
    assert (source / "f.002").read_bytes() == b"89"


def test_write_logs_chunk_range(fs, log_file):
    assert fs.write("/f", b"0123456789", 0) == 10
    assert fs.write("/g", b"ab", 0) == 2
    assert log_messages(log_file) == ["WRITE: f -> f.000 to f.002", "WRITE: g -> g.000"]


def test_write_replaces_old_chunks(fs, source):
    fs.write("/f", b"0123456789", 0)
    fs.write("/f", b"xy", 0)
    assert sorted(p.name for p in source.iterdir()) == ["f.000"]
    assert fs.read("/f", 100, 0) == b"xy"


def test_read_with_offset_and_size(fs):
    data = bytes(range(30))
    fs.write("/f", data, 0)
    assert fs.read("/f", 7, 5) == data[5:12]
    assert fs.read("/f", 100, 28) == data[28:]
    assert fs.read("/f", 10, 50) == b""


def test_read_logs(fs, log_file):
    fs.write("/f", b"abc", 0)
    assert fs.read("/f", 3, 0) == b"abc"
    assert log_messages(log_file)[-1] == "READ: f"


def test_getattr_root(fs):
    attr = fs.getattr("/")
    assert attr["st_nlink"] == 2
    assert attr["st_mode"] & 0o170000 == 0o040000


def test_getattr_sums_chunks(fs):
    fs.write("/f", b"0123456789", 0)
    attr = fs.getattr("/f")
    assert attr["st_size"] == 10
    assert attr["st_nlink"] == 1
    assert attr["st_mode"] & 0o170000 == 0o100000


def test_getattr_respects_max_chunks(source, log_file):
    fs = ChunkedFS(source, log_file, chunk_size=4, max_chunks=2)
    fs.write("/f", b"0123456789", 0)
    assert fs.getattr("/f")["st_size"] == 8
    assert fs.read("/f", 100, 0) == b"01234567"


def test_getattr_missing(fs):
    with pytest.raises(FileNotFoundError):
        fs.getattr("/ghost")


def test_readdir_lists_each_file_once(fs, source):
    fs.write("/a", b"0123456789", 0)
    fs.write("/b", b"x", 0)
    (source / "other.txt").write_text("ignored")
    assert fs.readdir("/") == [".", "..", "a", "b"]


def test_unlink_removes_all_chunks(fs, source, log_file):
    fs.write("/f", b"0123456789", 0)
    fs.unlink("/f")
    assert list(source.iterdir()) == []
    with pytest.raises(FileNotFoundError):
        fs.getattr("/f")
    assert log_messages(log_file)[-1] == "DELETE: f.000 - f.002"


def test_unlink_without_chunks(fs, log_file):
    fs.unlink("/none")
    assert fs.readdir("/") == [".", ".."]
    with pytest.raises(FileNotFoundError):
        fs.getattr("/none")
    assert log_messages(log_file) == ["DELETE: none (no chunks found)"]


def test_create_makes_empty_first_chunk(fs, source, log_file):
    fs.create("/new", 0o644)
    assert (source / "new.000").read_bytes() == b""
    assert fs.getattr("/new")["st_size"] == 0
    assert "new" in fs.readdir("/")
    assert log_messages(log_file) == ["CREATE: new"]


def test_create_in_missing_directory_raises(tmp_path, log_file):
    fs = ChunkedFS(tmp_path / "absent", log_file)
    with pytest.raises(FileNotFoundError):
        fs.create("/new", 0o644)


def test_open_returns_zero(fs):
    assert fs.open("/anything", 0) == 0