from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any


class SettingsLoader:
    """Singleton settings provider.

    Reads pyproject.toml [tool.mnbarf] if present.
    Provides defaults otherwise.
    """

    _instance: "SettingsLoader | None" = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):  # noqa: D401 - singleton boilerplate
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return
        self._initialized = True
        self._root = Path(__file__).resolve().parents[2]
        self._config: dict[str, Any] = {}
        self.reload()

    def _defaults(self) -> dict[str, Any]:
        root = self._root
        return {
            "logs_dir": str(root / "logs"),
            "log_file": str(root / "logs" / "mnbarf.log"),
            "log_level": "INFO",
            "log_rotation_bytes": 1_048_576,  # 1MB
            "log_backup_count": 5,
            "arfolyam_url": "http://www.mnb.hu/arfolyamok.asmx",
            "alapkamat_url": "http://www.mnb.hu/alapkamat.asmx",
            "request_timeout": 10.0,
            "retry_delay": 0.1,
            "retry_max_delay": 5.0,
            "retry_max_duration": 30.0,
            "retry_factor": 2.0,
            "retry_max_attempts": None,
            "currencies_via_info": False,
        }

    def reload(self) -> None:
        cfg = self._defaults()
        pyproject = self._root / "pyproject.toml"
        if pyproject.exists():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError:
                # Ignore malformed config; stick to defaults
                data = {}
            section = data.get("tool", {}).get("mnbarf", {})
            if isinstance(section, dict):
                cfg.update(section)
        self._config = cfg

    def get(self, key: str, default: Any | None = None) -> Any:
        return self._config.get(key, default)
