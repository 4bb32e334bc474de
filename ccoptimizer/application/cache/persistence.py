"""Saving and restoring response cache snapshots on disk."""

import json
from typing import Union
from pathlib import Path

import anyio

from .response_cache import ResponseCache
from ...domain.exceptions import SnapshotError
from ...domain.models import ImportResult
from ...logging import debug, info, LogRecord, LogEvent

PathLike = Union[str, Path]


async def save_snapshot(cache: ResponseCache, path: PathLike) -> int:
    """
    Export the cache and write the snapshot as JSON.

    Values go through JSON, so tuples and sets come back as lists after
    ``load_snapshot``.

    Args:
        cache: Cache to export
        path: Destination file; parent directories are created

    Returns:
        Number of entries written

    Raises:
        SnapshotError: If the snapshot cannot be serialized or written
    """
    snapshot = cache.export()
    target = anyio.Path(path)

    try:
        content = json.dumps(snapshot.model_dump(mode="json"), ensure_ascii=False)
        await target.parent.mkdir(parents=True, exist_ok=True)
        await target.write_text(content, encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        raise SnapshotError(
            f"Failed to write cache snapshot: {e}", path=str(path)
        ) from e

    info(
        LogRecord(
            event=LogEvent.SNAPSHOT_EXPORT.value,
            message=f"Saved cache snapshot with {len(snapshot.entries)} entries",
            data={"path": str(path), "entries": len(snapshot.entries)},
        )
    )
    return len(snapshot.entries)


async def load_snapshot(cache: ResponseCache, path: PathLike) -> ImportResult:
    """
    Read a snapshot file and import it into the cache.

    A missing file imports nothing.

    Raises:
        SnapshotError: If the file cannot be read or is not a snapshot
    """
    source = anyio.Path(path)
    if not await source.exists():
        debug(
            LogRecord(
                event=LogEvent.SNAPSHOT_IMPORT.value,
                message="No cache snapshot found",
                data={"path": str(path)},
            )
        )
        return ImportResult()

    try:
        content = await source.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, ValueError) as e:
        raise SnapshotError(
            f"Failed to read cache snapshot: {e}", path=str(path)
        ) from e

    if not isinstance(data, dict):
        raise SnapshotError("Cache snapshot must be a JSON object", path=str(path))

    return cache.import_snapshot(data)
