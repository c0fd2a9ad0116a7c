"""Animal record and the date helpers shared across the petregistry package."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Animal:
    """One pet: identity fields are fixed, commands only grow."""

    name: str
    species: str
    birth_date: date
    commands: list[str] = field(default_factory=list, hash=False)

    def __post_init__(self) -> None:
        # Own a private copy so no caller keeps a mutable alias.
        object.__setattr__(self, "commands", list(self.commands))

    def teach(self, command: str) -> None:
        self.commands.append(command)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.species,
            "birthDate": format_birth_date(self.birth_date),
            "commands": list(self.commands),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Animal":
        name = _require_str(d["name"], "name")
        species = _require_str(d["type"] if "type" in d else d["species"], "type")
        commands = d.get("commands") or []
        if not isinstance(commands, list):
            raise ValueError(f"commands must be a list, got {type(commands).__name__}")
        return cls(
            name=name,
            species=species,
            birth_date=_coerce_date(d["birthDate"]),
            commands=[_require_str(c, "command") for c in commands],
        )


def _require_str(value: object, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string, got {type(value).__name__}")
    return value


def format_birth_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_birth_date(text: str, today: date | None = None) -> tuple[date, bool]:
    """Parse a ``YYYY-MM-DD`` birth date typed by a user.

    Malformed input is not an error: today's date is substituted and the
    second element of the returned tuple is ``True``.
    """
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date(), False
    except ValueError:
        fallback = today or date.today()
        logger.warning(
            "Invalid birth date %r, using %s instead", text, format_birth_date(fallback)
        )
        return fallback, True


def _coerce_date(value: object) -> date:
    """Turn a stored ``birthDate`` value into a date.

    Besides ISO strings, integer epoch milliseconds are accepted: that is how
    data files written by the original program store their dates. Those hold
    local midnight, so they are read back in local time.
    """
    if isinstance(value, bool):
        raise ValueError(f"Unsupported birthDate value: {value!r}")
    if isinstance(value, int):
        try:
            return datetime.fromtimestamp(value / 1000).date()
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"birthDate {value!r} is out of range") from exc
    if isinstance(value, str):
        return datetime.strptime(value, DATE_FORMAT).date()
    raise ValueError(f"Unsupported birthDate value: {value!r}")
