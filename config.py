import json
import logging
from pathlib import Path

import configloader

from paths import CONFIG_ENV_VAR, CONFIG_NAME, config_path, resource_file
from singleton import singleton

logger = logging.getLogger(__name__)


@singleton
class ConfigLoader(object):
    def __init__(self):
        self._loader = configloader.ConfigLoader()
        self._default_path = resource_file(CONFIG_NAME)
        self._path = self._resolve_path()
        self.update()

    @property
    def path(self) -> Path:
        return self._path

    def update(self):
        with self._path.open("r", encoding="utf-8") as f:
            self._loader.update_from_json_file(f)
        logger.debug("Loaded config from %s", self._path)

    def __getitem__(self, item):
        return self._loader[item]

    def __contains__(self, item) -> bool:
        return item in self._loader

    def get(self, key: str | tuple, default=None):
        """Read ``key`` (or a nested tuple path) without touching the file."""
        if isinstance(key, str):
            key = (key,)
        node = self._loader
        for k in key:
            if not hasattr(node, "keys") or k not in node:
                return default
            node = node[k]
        return node

    def set(self, key: str | tuple, value):
        """
        Change record with key in config and write it back to disk.
        It's not implemented by __setitem__ for config safety
        :param key: If key is str then changing cfg[key].
        If key is tuple (key_1, ..., key_n) then changing cfg[key_1][...][key_n]
        :param value: New value
        """

        if isinstance(key, str):
            if key not in self._loader:
                raise ValueError(f'key {key!r} not in config keys')
            self._loader[key] = value
        else:
            to_update = self._loader
            for k in key[:-1]:
                if k not in to_update:
                    raise ValueError(f'key {k!r} not in config keys')
                to_update = to_update[k]

            if key[-1] not in to_update:
                raise ValueError(f'key {key[-1]!r} not in config keys')
            to_update[key[-1]] = value

        self._write()

    def _write(self) -> None:
        with self._path.open("w", encoding="utf-8") as f:
            json.dump(obj=dict(self._loader), fp=f, ensure_ascii=False, indent=2, separators=(',', ': '))

    def _resolve_path(self) -> Path:
        path = config_path()
        if path != self._default_path:
            self._ensure_user_config(path)
        return path

    def _ensure_user_config(self, target_path: Path) -> None:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        if not target_path.exists():
            target_path.write_text(self._default_path.read_text(encoding="utf-8"), encoding="utf-8")
