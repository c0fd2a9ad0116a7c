"""JSON file store: the whole animal collection as one document."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from petregistry.models import Animal


class StoreError(RuntimeError):
    """Base class for backing store failures."""


class StoreReadError(StoreError):
    """The store exists but could not be read or parsed."""


class StoreWriteError(StoreError):
    """The collection could not be written to the store."""


class JSONStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    # ------------------------------------------------------------------ #
    # Load
    # ------------------------------------------------------------------ #

    def load(self) -> list[Animal]:
        """Read every stored animal, in stored order.

        A missing file is an empty collection. Anything unreadable raises
        :class:`StoreReadError`.
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StoreReadError(f"Cannot read {self.path}: {exc}") from exc

        if not isinstance(data, list):
            raise StoreReadError(
                f"Expected a JSON array in {self.path}, got {type(data).__name__}"
            )

        animals = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise StoreReadError(f"Record {i} in {self.path} is not an object")
            try:
                animals.append(Animal.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreReadError(f"Record {i} in {self.path} is malformed: {exc}") from exc
        return animals

    # ------------------------------------------------------------------ #
    # Save
    # ------------------------------------------------------------------ #

    def save(self, animals: list[Animal]) -> None:
        """Overwrite the store with ``animals``.

        Writes to a temporary sibling file and renames it over the store, so
        readers never see a half-written document.
        """
        payload = json.dumps([a.to_dict() for a in animals], ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StoreWriteError(f"Cannot write {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
