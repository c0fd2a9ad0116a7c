"""Configuration loading and defaults."""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]


CONFIG_DIR_NAME = ".petregistry"

DEFAULT_CONFIG = {
    "store": {
        "path": "animal_data.json",
    },
    "species": {
        "known": ["dog", "cat", "hamster"],
        # Labels accepted by the original Russian-language menu
        "aliases": {
            "собака": "dog",
            "кошка": "cat",
            "хомяк": "hamster",
        },
    },
    "registry": {
        "autosave_commands": False,
    },
}


class Config:
    def __init__(self, data: dict, config_dir: Path):
        self._data = data
        self.config_dir = config_dir

    @classmethod
    def load(cls, project_root: Path) -> "Config":
        config_dir = project_root / CONFIG_DIR_NAME
        config_file = config_dir / "config.toml"

        data = _deep_merge(DEFAULT_CONFIG, {})

        if config_file.exists():
            with open(config_file, "rb") as f:
                user_data = tomllib.load(f)
            data = _deep_merge(DEFAULT_CONFIG, user_data)

        return cls(data, config_dir)

    @classmethod
    def load_from_cwd(cls) -> "Config":
        root = _find_project_root(Path.cwd())
        return cls.load(root)

    # --- store ---
    @property
    def store_path(self) -> Path:
        p = Path(self._data["store"]["path"])
        if not p.is_absolute():
            p = self.config_dir.parent / p
        return p

    # --- species ---
    @property
    def known_species(self) -> list[str]:
        return [s.casefold() for s in self._data["species"]["known"]]

    @property
    def species_aliases(self) -> dict[str, str]:
        return {
            k.casefold(): v.casefold()
            for k, v in self._data["species"].get("aliases", {}).items()
        }

    # --- registry ---
    @property
    def autosave_commands(self) -> bool:
        return bool(self._data["registry"]["autosave_commands"])


def _deep_merge(base: dict, override: dict) -> dict:
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _find_project_root(start: Path) -> Path:
    """Walk up to find the directory containing .petregistry/ or .git/."""
    current = start.resolve()
    while True:
        if (current / CONFIG_DIR_NAME).exists() or (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return start.resolve()
        current = parent


DEFAULT_CONFIG_TOML = """\
[store]
path = "animal_data.json"

[species]
known = ["dog", "cat", "hamster"]

[species.aliases]
"собака" = "dog"
"кошка"  = "cat"
"хомяк"  = "hamster"

[registry]
autosave_commands = false
"""
