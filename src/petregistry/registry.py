"""Animal registry: the in-memory collection and its persistence policy."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from petregistry.config import DEFAULT_CONFIG, Config
from petregistry.models import Animal, parse_birth_date
from petregistry.storage.store import JSONStore, StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)


class CreationError(ValueError):
    """No animal could be created from the given input."""


class UnknownSpeciesError(CreationError):
    def __init__(self, species: str, known: Iterable[str]):
        self.species = species
        self.known = list(known)
        super().__init__(
            f"Unknown species {species!r}, expected one of: {', '.join(self.known)}"
        )


class InvalidAnimalError(CreationError):
    pass


class AnimalNotFoundError(LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Animal {name!r} not found")


class AnimalRegistry:
    """Ordered collection of animals backed by a :class:`JSONStore`.

    The collection is loaded once at construction and the whole of it is
    written back after every :meth:`add_animal`. Teaching a command only
    changes memory unless ``autosave_commands`` is set.
    """

    def __init__(
        self,
        store: JSONStore,
        known_species: Iterable[str] | None = None,
        aliases: dict[str, str] | None = None,
        autosave_commands: bool = False,
    ):
        self.store = store
        if known_species is None:
            known_species = DEFAULT_CONFIG["species"]["known"]
        self.known_species = [s.casefold() for s in known_species]
        self.aliases = {k.casefold(): v.casefold() for k, v in (aliases or {}).items()}
        self.autosave_commands = autosave_commands

        self.load_warning: str | None = None
        self.last_save_error: StoreWriteError | None = None
        self.last_date_fallback = False

        self._animals: list[Animal] = self._load()
        self._counter = len(self._animals)

    @classmethod
    def from_config(cls, config: Config) -> "AnimalRegistry":
        return cls(
            JSONStore(config.store_path),
            known_species=config.known_species,
            aliases=config.species_aliases,
            autosave_commands=config.autosave_commands,
        )

    def _load(self) -> list[Animal]:
        if not self.store.exists():
            logger.info("No store at %s, starting with an empty registry", self.store.path)
            return []
        try:
            animals = self.store.load()
        except StoreReadError as exc:
            self.load_warning = str(exc)
            logger.warning("%s. Starting with an empty registry.", exc)
            return []
        logger.debug("Loaded %d animals from %s", len(animals), self.store.path)
        return animals

    # ------------------------------------------------------------------ #
    # Mutation
    # ------------------------------------------------------------------ #

    def add_animal(self, animal: Animal) -> Animal:
        self._animals.append(animal)
        self._counter += 1
        self.save()
        return animal

    def create_animal(
        self,
        name: str,
        species: str,
        birth_date_text: str,
        today: date | None = None,
    ) -> Animal:
        """Build an animal from raw user input without adding it.

        Raises :class:`UnknownSpeciesError` or :class:`InvalidAnimalError`
        and leaves the registry untouched. A malformed date falls back to
        today; :attr:`last_date_fallback` tells whether that happened.
        """
        self.last_date_fallback = False
        name = name.strip()
        if not name:
            raise InvalidAnimalError("Animal name must not be empty")

        tag = self.resolve_species(species)
        birth_date, fell_back = parse_birth_date(birth_date_text, today=today)
        self.last_date_fallback = fell_back
        return Animal(name=name, species=tag, birth_date=birth_date)

    def register(
        self,
        name: str,
        species: str,
        birth_date_text: str,
        today: date | None = None,
    ) -> Animal:
        return self.add_animal(self.create_animal(name, species, birth_date_text, today=today))

    def resolve_species(self, label: str) -> str:
        key = label.strip().casefold()
        key = self.aliases.get(key, key)
        if key not in self.known_species:
            raise UnknownSpeciesError(label, self.known_species)
        return key

    def teach_command(self, animal: Animal, command: str) -> None:
        animal.teach(command)
        logger.info("Taught %r to %s", command, animal.name)
        if self.autosave_commands:
            self.save()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def animals(self) -> tuple[Animal, ...]:
        return tuple(self._animals)

    def find_by_name(self, name: str) -> Animal | None:
        wanted = name.casefold()
        for animal in self._animals:
            if animal.name.casefold() == wanted:
                return animal
        return None

    def get(self, name: str) -> Animal:
        animal = self.find_by_name(name)
        if animal is None:
            raise AnimalNotFoundError(name)
        return animal

    def list_commands(self, animal: Animal) -> list[str]:
        return list(animal.commands)

    def sorted_by_birth_date(self) -> list[Animal]:
        # sorted() is stable and leaves the canonical order alone
        return sorted(self._animals, key=lambda a: a.birth_date)

    def count(self) -> int:
        return self._counter

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def save(self) -> bool:
        """Write the full collection. Failures are logged, never raised."""
        try:
            self.store.save(self._animals)
        except StoreWriteError as exc:
            self.last_save_error = exc
            logger.error("Could not save registry: %s", exc)
            return False
        self.last_save_error = None
        return True
