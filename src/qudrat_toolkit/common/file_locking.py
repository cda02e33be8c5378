"""
Module: common.file_locking

Purpose:
    Cross-platform locked access to the small JSON documents the toolkit
    persists (calibration settings, the test store). Uses portalocker for
    Mac, Windows, and Linux compatibility.

Key Functions:
    - read_json: Read a JSON object under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - calibration.store: Crop configuration persistence
    - storage.repository: JsonTestRepository
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import portalocker

logger = logging.getLogger(__name__)


def read_json(
    path: Path,
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read a JSON object with a shared lock held.

    Args:
        path: Path to JSON file.
        default: Factory used when the file is missing or empty.

    Returns:
        Parsed JSON object.

    Raises:
        json.JSONDecodeError: If the file holds malformed JSON.
    """
    if not path.exists():
        return default()

    with open(path, "r", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_SH)
        try:
            content = f.read()
        finally:
            portalocker.unlock(f)

    if not content.strip():
        return default()
    return json.loads(content)


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Update a JSON object in place while holding an exclusive lock.

    The file (and its parent directory) is created when missing. Keys the
    modifier does not touch are written back unchanged.

    Args:
        path: Settings or store file.
        modifier: Receives the current object and returns the new one.
        default: Factory for the object of a new or empty file.

    Returns:
        The object now on disk.

    Example:
        >>> def set_box(existing):
        ...     existing["quantitative_crop_config"] = blob
        ...     return existing
        >>> locked_read_modify_write_json(settings_path, set_box)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not path.exists():
        path.write_text(json.dumps(default(), indent=2), encoding="utf-8")

    with open(path, "r+", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            content = f.read()
            existing = json.loads(content) if content.strip() else default()

            modified = modifier(existing)

            f.seek(0)
            f.truncate()
            json.dump(modified, f, indent=2, ensure_ascii=False)
        finally:
            portalocker.unlock(f)

    logger.debug(f"Wrote {path.name}")
    return modified
