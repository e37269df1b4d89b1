# ─────────────────────────────────────────────────────────────────
# config_store.py — The Camera Configuration Record
#
# One ConfigStore exists per process. It is created at startup,
# loaded from the JSON file, and handed to the config routes.
#
# LOCKING:
#   _lock        guards the in-memory record. Held only for the
#                instant it takes to read or swap the reference.
#   _update_lock serializes updates, including their write to disk.
#                Readers never touch it, so a slow disk never
#                blocks GET /get-config.
# ─────────────────────────────────────────────────────────────────

import json
import logging
import os
import threading
from pathlib import Path

from pydantic import ValidationError

from models import DEFAULT_CONFIG, ConfigRecord, ConfigUpdate

logger = logging.getLogger("config")

# Message returned to the client for each field that fails validation
FIELD_MESSAGES = {
    "ssid": "SSID must be a string",
    "password": "Password must be a string",
    "phoneNumber": "Invalid phone number (e.g. +261123456789)",
    "startHour": "Invalid start hour (0-23)",
    "endHour": "Invalid end hour (0-23)",
}


class ConfigValidationError(Exception):
    """A config update was refused. Nothing was applied."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ConfigStore:
    """In-memory configuration record backed by a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._record = DEFAULT_CONFIG.model_copy()
        self._lock = threading.Lock()
        self._update_lock = threading.Lock()

    def load(self) -> ConfigRecord:
        """
        Loads the record from disk.

        A missing, unreadable or invalid file is replaced by the
        defaults, which are written straight back. This never raises:
        the camera always gets a usable config.
        """

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            record = ConfigRecord.model_validate(data)
        except (OSError, ValueError, ValidationError) as exc:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.warning(f"⚠️  Could not load {self.path} ({exc}) — using defaults")
            record = DEFAULT_CONFIG.model_copy()
            with self._lock:
                self._record = record
            try:
                self._persist(record)
                logger.info(f"💾 Default configuration saved: {record.to_wire()}")
            except OSError:
                logger.exception(f"❌ Could not save default configuration to {self.path}")
            return record.model_copy()

        with self._lock:
            self._record = record
        logger.info(f"📂 Configuration loaded: {record.to_wire()}")
        return record.model_copy()

    def read(self) -> ConfigRecord:
        """Current record. No I/O; returns a copy the caller may keep."""
        with self._lock:
            return self._record.model_copy()

    def update(self, partial) -> ConfigRecord:
        """
        Applies a partial update and saves the full record.

        Raises ConfigValidationError, naming the first bad field, if
        any field sent is invalid; nothing changes in that case.
        Raises OSError if the file can't be written. The new values
        are already live in memory by then and are not rolled back.
        """

        if not isinstance(partial, dict):
            raise ConfigValidationError("body", "Request body must be a JSON object")

        try:
            changes = ConfigUpdate.model_validate(partial).changes()
        except ValidationError as exc:
            field = str(exc.errors()[0]["loc"][0])
            message = FIELD_MESSAGES.get(field, f"Invalid value for {field}")
            raise ConfigValidationError(field, message) from exc

        with self._update_lock:
            with self._lock:
                record = self._record.model_copy(update=changes)
                self._record = record

            # Disk write happens outside _lock, readers are never blocked by it
            self._persist(record)

        logger.info(f"🔧 Configuration updated: {record.to_wire()}")
        return record.model_copy()

    def _persist(self, record: ConfigRecord) -> None:
        text = json.dumps(record.to_wire(), indent=2, ensure_ascii=False)
        # Written beside the real file then swapped in, so a crash mid-write
        # never leaves a truncated config.json behind
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
