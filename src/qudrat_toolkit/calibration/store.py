"""
Crop calibration persistence.

Holds the question and answer regions an operator drew on a reference
page. The configuration is stored as one JSON blob under a fixed key of
a settings file, so other settings can share the file. Any malformed
data falls back to an empty configuration, never a crash.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from qudrat_toolkit.common.constants import CROP_CONFIG_KEY
from qudrat_toolkit.common.file_locking import locked_read_modify_write_json, read_json
from qudrat_toolkit.core.models import BoxKind, CalibrationConfig, CropBox

logger = logging.getLogger(__name__)

# Boxes must exceed this in both dimensions; smaller ones are stray clicks.
MIN_BOX_SIZE = 20


class CalibrationStore:
    """JSON-backed store for the crop calibration."""

    def __init__(self, path: Path, *, key: str = CROP_CONFIG_KEY) -> None:
        self.path = path
        self.key = key
        self.load_error: Optional[str] = None
        self._lock = threading.Lock()
        self._config = self._load()

    def _load(self) -> CalibrationConfig:
        try:
            data = read_json(self.path)
        except json.JSONDecodeError as e:
            self.load_error = f"Settings file is corrupted: {e}"
            logger.warning(f"{self.load_error}; starting with no calibration")
            return CalibrationConfig()
        except OSError as e:
            self.load_error = f"Failed to read settings: {e}"
            logger.warning(f"{self.load_error}; starting with no calibration")
            return CalibrationConfig()

        blob = data.get(self.key) if isinstance(data, dict) else None
        if not blob:
            return CalibrationConfig()

        try:
            return CalibrationConfig.from_dict(blob)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.load_error = f"Stored calibration is invalid: {e}"
            logger.warning(f"{self.load_error}; starting with no calibration")
            return CalibrationConfig()

    def current(self) -> CalibrationConfig:
        """The current configuration; immutable, so safe to keep as a snapshot."""
        with self._lock:
            return self._config

    def define(self, kind: BoxKind, box: CropBox) -> bool:
        """
        Set one region and persist the configuration.

        Boxes not larger than MIN_BOX_SIZE in both dimensions are
        discarded without touching the stored configuration.

        Returns:
            True if the box was stored.
        """
        if not (box.width > MIN_BOX_SIZE and box.height > MIN_BOX_SIZE):
            logger.debug(f"Ignoring {kind.value} box {box}: below {MIN_BOX_SIZE}px")
            return False

        with self._lock:
            updated = self._config.with_box(kind, box)
            self._save(updated)
            self._config = updated
        logger.info(f"Calibrated {kind.value} box: {box}")
        return True

    def clear(self, kind: Optional[BoxKind] = None) -> None:
        """Forget one region, or both when ``kind`` is None."""
        with self._lock:
            if kind is None:
                updated = CalibrationConfig()
            else:
                updated = self._config.with_box(kind, None)
            self._save(updated)
            self._config = updated

    def _save(self, config: CalibrationConfig) -> None:
        blob = config.to_dict()

        def update(data: Dict[str, Any]) -> Dict[str, Any]:
            data[self.key] = blob
            return data

        locked_read_modify_write_json(self.path, update)
