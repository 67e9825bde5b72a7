"""Locally persisted client preferences: server base URL and device identity."""

import json
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import structlog

from .error_handling import ValidationError

logger = structlog.get_logger(__name__)

PREFERENCES_FILE = "preferences.json"


class ClientPreferences:
    """
    Small JSON-backed store for values that must survive restarts.

    The device id is generated once on first access and never regenerated;
    it is the only scoping mechanism the server has for this client.
    """

    def __init__(self, data_dir: Path, default_server_url: str):
        self.path = Path(data_dir) / PREFERENCES_FILE
        self.default_server_url = default_server_url.rstrip("/")
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preferences file", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to temporary file first, then rename
        temp_file = self.path.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        temp_file.replace(self.path)

    @property
    def device_id(self) -> str:
        device_id = self._data.get("device_id")
        if not device_id:
            device_id = str(uuid.uuid4())
            self._data["device_id"] = device_id
            self._save()
            logger.info("Generated device identifier", device_id=device_id)
        return device_id

    @property
    def server_url(self) -> str:
        return self._data.get("server_url") or self.default_server_url

    @server_url.setter
    def server_url(self, value: str) -> None:
        url = value.strip().rstrip("/")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"Invalid server URL: {value!r}", field="server_url")
        self._data["server_url"] = url
        self._save()
        logger.info("Server URL updated", server_url=url)

    def reset_server_url(self) -> None:
        self._data.pop("server_url", None)
        self._save()

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._data.get(key, default)
