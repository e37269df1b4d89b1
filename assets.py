# ─────────────────────────────────────────────────────────────────
# assets.py — Image Storage
#
# Every uploaded image becomes one file named
#     capture_<epoch milliseconds>.jpg
# in the upload directory, and is fetched back at
#     /<asset root>/<name>
# through the static mount set up in main.py.
#
# Two uploads landing in the same millisecond would get the same
# name. The store remembers the last timestamp it handed out and
# moves forward by one millisecond when needed, and files are opened
# in exclusive-create mode, so an existing image is never overwritten.
# ─────────────────────────────────────────────────────────────────

import logging
import threading
import time
from pathlib import Path

logger = logging.getLogger("assets")


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class AssetStore:
    """Writes image bytes to disk and returns the URL they're served at."""

    def __init__(self, directory: Path, url_root: str = "Uploads"):
        self.directory = Path(directory)
        self.url_root = url_root.strip("/")
        self._last_ms = 0
        self._name_lock = threading.Lock()

    def ensure_directory(self) -> None:
        """Creates the upload directory. Fine if it already exists."""
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"📁 Upload directory ready: {self.directory.resolve()}")

    def _next_timestamp(self) -> int:
        with self._name_lock:
            stamp = max(now_ms(), self._last_ms + 1)
            self._last_ms = stamp
            return stamp

    def locator_for(self, name: str) -> str:
        return f"/{self.url_root}/{name}"

    def store(self, data: bytes) -> str:
        """
        Writes one image and returns its locator.

        Raises OSError when the file can't be written (disk full,
        permissions, directory gone). Nothing is left behind on failure.
        """

        while True:
            name = f"capture_{self._next_timestamp()}.jpg"
            path = self.directory / name
            try:
                # "xb" fails instead of overwriting an existing capture
                with open(path, "xb") as f:
                    f.write(data)
            except FileExistsError:
                # left over from an earlier run with a clock set ahead
                continue
            except OSError:
                path.unlink(missing_ok=True)
                raise
            break

        locator = self.locator_for(name)
        logger.info(f"📸 Image stored: {locator} ({len(data)} bytes)")
        return locator
