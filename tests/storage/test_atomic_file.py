import errno
import os
import threading

import pytest
from flaky import flaky

from services.storage import atomic_file
from services.storage.atomic_file import (
    PART_SUFFIX,
    discard_part,
    move,
    open_part,
    part_path,
    publish,
    publish_bytes,
)
from services.storage.errors import AtomicMoveUnsupported, SettingsIOError


def test_part_path_is_sibling_with_reserved_suffix(tmp_path):
    target = tmp_path / "a" / ".." / "settings.json"
    assert part_path(target) == tmp_path / ("settings.json" + PART_SUFFIX)


def test_publish_replaces_content_and_leaves_no_part_file(tmp_path):
    target = tmp_path / "settings.json"
    target.write_bytes(b"old")

    publish(target, lambda sink: sink.write(b'{"maps": {}}'))

    assert target.read_bytes() == b'{"maps": {}}'
    assert not part_path(target).exists()


def test_publish_creates_missing_directories(tmp_path):
    target = tmp_path / "deep" / "nested" / "settings.json"

    publish_bytes(target, b"{}")

    assert target.read_bytes() == b"{}"


def test_publish_truncates_stale_part_file(tmp_path):
    target = tmp_path / "settings.json"
    part_path(target).write_bytes(b"leftover from a crashed run that was much longer")

    publish_bytes(target, b"new")

    assert target.read_bytes() == b"new"


def test_aborted_write_leaves_target_untouched(tmp_path):
    """A writer failing mid-stream must not alter the published file."""
    target = tmp_path / "settings.json"
    target.write_bytes(b"version 1")
    before = os.stat(target)

    def failing_writer(sink):
        sink.write(b"version 2, first half")
        raise RuntimeError("render pipeline went away")

    with pytest.raises(RuntimeError):
        publish(target, failing_writer)

    assert target.read_bytes() == b"version 1"
    after = os.stat(target)
    assert after.st_mtime_ns == before.st_mtime_ns
    assert after.st_ino == before.st_ino
    assert part_path(target).exists()


def test_open_part_context_manager_publishes_on_exit(tmp_path):
    target = tmp_path / "settings.json"
    target.write_bytes(b"before")

    with open_part(target) as sink:
        sink.write(b"after")
        assert target.read_bytes() == b"before"

    assert target.read_bytes() == b"after"


def test_move_of_missing_source_is_a_noop(tmp_path):
    destination = tmp_path / "settings.json"
    destination.write_bytes(b"keep me")

    move(tmp_path / "missing.filepart", destination)

    assert destination.read_bytes() == b"keep me"


def test_move_falls_back_when_atomic_rename_is_rejected(tmp_path, mocker, caplog):
    source = tmp_path / "settings.json.filepart"
    destination = tmp_path / "settings.json"
    source.write_bytes(b"new")
    destination.write_bytes(b"old")
    mocker.patch.object(
        atomic_file.os, "replace", side_effect=OSError(errno.EXDEV, "Invalid cross-device link")
    )

    move(source, destination)

    assert destination.read_bytes() == b"new"
    assert not source.exists()
    assert "non-atomic" in caplog.text


def test_move_reports_io_error_when_fallback_fails(tmp_path, mocker):
    source = tmp_path / "settings.json.filepart"
    destination = tmp_path / "settings.json"
    source.write_bytes(b"new")
    destination.write_bytes(b"old")
    mocker.patch.object(
        atomic_file.os, "replace", side_effect=OSError(errno.EXDEV, "Invalid cross-device link")
    )
    mocker.patch.object(
        atomic_file.shutil, "move", side_effect=OSError(errno.ENOSPC, "No space left on device")
    )

    with pytest.raises(SettingsIOError) as excinfo:
        move(source, destination)

    assert isinstance(excinfo.value.__cause__, AtomicMoveUnsupported)
    assert destination.read_bytes() == b"old"


def test_discard_part_removes_leftover(tmp_path):
    target = tmp_path / "settings.json"
    part_path(target).write_bytes(b"partial")

    assert discard_part(target) is True
    assert not part_path(target).exists()
    assert discard_part(target) is False


@flaky(max_runs=3)
def test_concurrent_reader_never_sees_partial_content(tmp_path):
    """Readers racing with publishers observe one complete version or the other."""
    target = tmp_path / "settings.json"
    versions = [b"A" * 200_000, b"B" * 300_000]
    publish_bytes(target, versions[0])
    stop = threading.Event()
    observed = []

    def reader():
        while not stop.is_set():
            observed.append(target.read_bytes())

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for index in range(40):
            publish_bytes(target, versions[index % 2])
    finally:
        stop.set()
        thread.join()

    assert observed
    assert all(content in versions for content in observed)
