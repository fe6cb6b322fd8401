"""
Configuration for the label extraction system.

Settings live in ``config/settings.yaml``. A different file can be chosen
with ``--config`` on the command line or the ``LABEL_EXTRACTION_CONFIG``
environment variable. Lookups use dot notation and every caller passes its
own default, so a trimmed-down settings file still works:

    >>> get_config("render.segmentation_scale", 6000)
    6000
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "LABEL_EXTRACTION_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"

# Keys under ``paths`` that are resolved against the working directory
PATH_KEYS = ("temp_dir", "output_dir")

_MISSING = object()


def _lookup(tree: Dict[str, Any], key: str) -> Any:
    node: Any = tree
    for part in key.split('.'):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


class ConfigurationManager:
    """
    Process-wide settings loaded from one YAML file.

    The first construction loads the file. Later constructions return the
    same instance; passing a different ``config_path`` reloads from it.

    Attributes:
        config_path (Path): File the current settings were read from.
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.config_path = None
            instance._settings = {}
            cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        path = self._choose_path(config_path)
        if self.config_path is None or (config_path is not None and path != self.config_path):
            self.load(path)

    @staticmethod
    def _choose_path(config_path: Optional[str]) -> Path:
        if config_path:
            return Path(config_path)
        if os.environ.get(CONFIG_ENV_VAR):
            return Path(os.environ[CONFIG_ENV_VAR])
        return DEFAULT_CONFIG_PATH

    def load(self, path: Path) -> None:
        """
        Replace the current settings with the contents of ``path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            settings = yaml.safe_load(f) or {}

        paths = settings.get('paths') or {}
        for key in PATH_KEYS:
            value = paths.get(key)
            if value and not Path(value).is_absolute():
                paths[key] = str(Path.cwd() / value)

        self._settings = settings
        self.config_path = path

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at dot-notation ``key``, or ``default`` when unset."""
        value = _lookup(self._settings, key)
        return default if value is _MISSING else value

    def section(self, name: str) -> Dict[str, Any]:
        """Return a copy of one top-level section (``render``, ``ocr`` ...)."""
        value = self._settings.get(name)
        return dict(value) if isinstance(value, dict) else {}

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next construction reads the file again."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
