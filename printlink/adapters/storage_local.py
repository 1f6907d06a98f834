from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from printlink.domain.settings import ConnectivitySettings

log = logging.getLogger(__name__)

SETTINGS_FILENAME = "user_settings.json"


class SettingsStore:
    """Local filesystem storage for connectivity settings (JSON)."""

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILENAME)

    def save_user_settings(self, payload: Dict[str, Any]) -> None:
        os.makedirs(self.root, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)

    def load_user_settings(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: expected a JSON object")
        return data

    # ---- Typed helpers ----
    def load_settings(self) -> ConnectivitySettings:
        """Return persisted settings, or defaults when nothing is stored."""
        payload = self.load_user_settings()
        if payload is None:
            log.debug("No settings at %s; using defaults", self.path)
            return ConnectivitySettings()
        return ConnectivitySettings.from_dict(payload)

    def save_settings(self, settings: ConnectivitySettings) -> None:
        self.save_user_settings(settings.to_dict())


__all__ = ["SETTINGS_FILENAME", "SettingsStore"]
