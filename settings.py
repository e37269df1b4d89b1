# ─────────────────────────────────────────────────────────────────
# settings.py — Process Configuration
#
# Everything that changes between a laptop and the deployed box
# (port, where images land, where the config file lives) is read
# from the environment here. Nothing else in the project touches
# os.environ.
# ─────────────────────────────────────────────────────────────────

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Settings:
    """Server settings, with defaults suitable for local development."""
    host: str = "0.0.0.0"
    port: int = 8080
    upload_dir: Path = Path("Uploads")     # where capture_*.jpg files are written
    asset_root: str = "Uploads"            # URL prefix the images are served under
    config_file: Path = Path("config.json")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings, letting environment variables override defaults."""
        settings = cls()

        if os.getenv("HOST"):
            settings.host = os.getenv("HOST")
        if os.getenv("PORT"):
            settings.port = int(os.getenv("PORT"))
        if os.getenv("UPLOAD_DIR"):
            settings.upload_dir = Path(os.getenv("UPLOAD_DIR"))
        if os.getenv("ASSET_ROOT"):
            settings.asset_root = os.getenv("ASSET_ROOT").strip("/")
        if os.getenv("CONFIG_FILE"):
            settings.config_file = Path(os.getenv("CONFIG_FILE"))
        if os.getenv("LOG_LEVEL"):
            settings.log_level = os.getenv("LOG_LEVEL").upper()

        return settings
