"""
Crash-safe file publication.

Content is streamed into a ``.filepart`` sibling of the target and renamed
over the target only once writing has completed. Readers opening the target
therefore see either the previous or the new complete content, never a
partial write. Two publishers racing on the same target are not arbitrated
here: the last rename wins.
"""

from __future__ import annotations

import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from services.storage.errors import AtomicMoveUnsupported, SettingsIOError

logger = logging.getLogger(__name__)

PART_SUFFIX = ".filepart"

ContentWriter = Callable[[BinaryIO], None]


def part_path(target: Path | str) -> Path:
    """Return the temporary sibling used while publishing ``target``."""
    target = Path(os.path.normpath(target))
    return target.with_name(target.name + PART_SUFFIX)


@contextmanager
def open_part(target: Path | str) -> Iterator[BinaryIO]:
    """
    Yield a binary sink whose content replaces ``target`` on clean exit.

    If the block raises, the target is left untouched and the part file is
    kept on disk; see :func:`discard_part`.
    """
    target = Path(target)
    part = part_path(target)
    try:
        part.parent.mkdir(parents=True, exist_ok=True)
        handle = open(part, "wb")
    except OSError as exc:
        raise SettingsIOError(f"Unable to open {part} for writing: {exc}", path=target) from exc

    with handle:
        yield handle
        try:
            handle.flush()
            os.fsync(handle.fileno())
        except OSError as exc:
            raise SettingsIOError(f"Unable to flush {part}: {exc}", path=target) from exc

    if not part.exists():
        return
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SettingsIOError(f"Unable to create {target.parent}: {exc}", path=target) from exc
    move(part, target)
    logger.debug("Published %s", target)


def publish(target: Path | str, writer: ContentWriter) -> None:
    """Atomically replace ``target`` with whatever ``writer`` streams into the sink."""
    with open_part(target) as sink:
        writer(sink)


def publish_bytes(target: Path | str, data: bytes) -> None:
    """Atomically replace ``target`` with ``data``."""
    publish(target, lambda sink: sink.write(data))


def move(source: Path | str, destination: Path | str) -> None:
    """
    Rename ``source`` over ``destination``, atomically when the platform allows.

    A missing source is treated as already moved. When the atomic rename is
    rejected (e.g. across devices) a copy-then-delete move is attempted.

    Raises:
        SettingsIOError: if the fallback move fails as well.
    """
    source = Path(source)
    destination = Path(destination)
    try:
        os.replace(source, destination)
        return
    except FileNotFoundError:
        if not source.exists():
            return
        unsupported = AtomicMoveUnsupported(
            f"Atomic rename of {source} rejected: destination directory missing",
            path=destination,
        )
    except OSError as exc:
        unsupported = AtomicMoveUnsupported(
            f"Atomic rename of {source} rejected: {exc}", path=destination
        )

    logger.warning("%s; falling back to a non-atomic move.", unsupported)
    try:
        shutil.move(str(source), str(destination))
    except FileNotFoundError:
        if source.exists():
            raise SettingsIOError(
                f"Unable to move {source} to {destination}", path=destination
            ) from unsupported
    except OSError as exc:
        raise SettingsIOError(
            f"Unable to move {source} to {destination}: {exc}", path=destination
        ) from unsupported


def discard_part(target: Path | str) -> bool:
    """Delete a part file left behind by an abandoned publish of ``target``."""
    part = part_path(target)
    try:
        part.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise SettingsIOError(f"Unable to remove stale {part}: {exc}", path=part) from exc
    logger.warning("Removed stale partial file %s", part)
    return True
