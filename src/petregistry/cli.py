"""Command-line interface for petregistry."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from petregistry.config import CONFIG_DIR_NAME, DEFAULT_CONFIG_TOML, Config
from petregistry.models import Animal, format_birth_date
from petregistry.registry import AnimalRegistry, CreationError


@click.group()
@click.option("--path", default=None, help="Project root (default: auto-detect)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, path: str | None, verbose: bool):
    """petregistry — keep track of your pets and the commands they know."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = Path(path).resolve() if path else None


def _open_registry(ctx: click.Context) -> AnimalRegistry:
    root = ctx.obj
    config = Config.load(root) if root else Config.load_from_cwd()
    return AnimalRegistry.from_config(config)


def _report_save(registry: AnimalRegistry) -> None:
    if registry.last_save_error is not None:
        click.echo(f"Warning: changes not saved — {registry.last_save_error}", err=True)


# --------------------------------------------------------------------------- #
# init
# --------------------------------------------------------------------------- #

@main.command()
@click.pass_context
def init(ctx: click.Context):
    """Create .petregistry/config.toml in the project root."""
    root = ctx.obj or Path.cwd().resolve()
    config_dir = root / CONFIG_DIR_NAME
    config_file = config_dir / "config.toml"

    if config_dir.exists():
        click.echo(f"Already initialised at {config_dir}")
    else:
        config_dir.mkdir(parents=True)
        click.echo(f"Created {config_dir}")

    if not config_file.exists():
        config_file.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
        click.echo(f"Created {config_file}")
    else:
        click.echo(f"Config already exists: {config_file}")


# --------------------------------------------------------------------------- #
# add / teach
# --------------------------------------------------------------------------- #

@main.command()
@click.argument("name")
@click.argument("species")
@click.argument("birth_date")
@click.pass_context
def add(ctx: click.Context, name: str, species: str, birth_date: str):
    """Add an animal. BIRTH_DATE is YYYY-MM-DD."""
    registry = _open_registry(ctx)
    try:
        animal = registry.register(name, species, birth_date)
    except CreationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if registry.last_date_fallback:
        click.echo(
            f"Invalid date format, using {format_birth_date(animal.birth_date)} as birth date.",
            err=True,
        )
    _report_save(registry)
    click.echo(f"Added {animal.name} ({animal.species}). Total animals: {registry.count()}")


@main.command()
@click.argument("name")
@click.argument("command")
@click.pass_context
def teach(ctx: click.Context, name: str, command: str):
    """Teach a new command to the named animal."""
    registry = _open_registry(ctx)
    animal = registry.find_by_name(name)
    if animal is None:
        click.echo(f"Animal '{name}' not found.")
        sys.exit(1)

    registry.teach_command(animal, command)
    # Each invocation is its own process, so persist explicitly.
    if not registry.autosave_commands:
        registry.save()
    _report_save(registry)
    click.echo(f"Taught '{command}' to {animal.name}.")


# --------------------------------------------------------------------------- #
# queries
# --------------------------------------------------------------------------- #

@main.command()
@click.argument("name")
@click.pass_context
def commands(ctx: click.Context, name: str):
    """List the commands the named animal knows."""
    registry = _open_registry(ctx)
    animal = registry.find_by_name(name)
    if animal is None:
        click.echo(f"Animal '{name}' not found.")
        sys.exit(1)
    _echo_commands(registry, animal)


@main.command("list")
@click.pass_context
def list_animals(ctx: click.Context):
    """List all animals, oldest first."""
    registry = _open_registry(ctx)
    _echo_animals(registry)


@main.command()
@click.pass_context
def count(ctx: click.Context):
    """Show the total number of animals."""
    registry = _open_registry(ctx)
    click.echo(f"Total animals: {registry.count()}")


def _echo_commands(registry: AnimalRegistry, animal: Animal) -> None:
    cmds = registry.list_commands(animal)
    if not cmds:
        click.echo(f"{animal.name} knows no commands yet.")
        return
    click.echo(f"Commands for {animal.name}:")
    for cmd in cmds:
        click.echo(f"  {cmd}")


def _echo_animals(registry: AnimalRegistry) -> None:
    animals = registry.sorted_by_birth_date()
    if not animals:
        click.echo("No animals registered.")
        return

    click.echo(f"{'Name':<20}  {'Species':<10}  Birth date")
    click.echo("-" * 46)
    for a in animals:
        click.echo(f"{a.name:<20}  {a.species:<10}  {format_birth_date(a.birth_date)}")


# --------------------------------------------------------------------------- #
# menu
# --------------------------------------------------------------------------- #

_MENU = """\
1. Add a new animal
2. List commands of an animal
3. Teach a new command
4. List animals by birth date
5. Show total number of animals
0. Exit"""


@main.command()
@click.pass_context
def menu(ctx: click.Context):
    """Run the interactive menu."""
    registry = _open_registry(ctx)
    species_hint = "/".join(registry.known_species)

    while True:
        click.echo(_MENU)
        choice = click.prompt("Your choice", type=int, default=0, show_default=False)

        if choice == 0:
            click.echo("Bye.")
            return
        elif choice == 1:
            name = click.prompt("Name")
            species = click.prompt(f"Species ({species_hint})")
            birth = click.prompt("Birth date (YYYY-MM-DD)")
            try:
                animal = registry.create_animal(name, species, birth)
            except CreationError as exc:
                click.echo(f"Error: {exc}")
                continue
            if registry.last_date_fallback:
                click.echo("Invalid date format, using today as birth date.")
            registry.add_animal(animal)
            _report_save(registry)
            click.echo("Animal added.")
        elif choice in (2, 3):
            name = click.prompt("Name")
            animal = registry.find_by_name(name)
            if animal is None:
                click.echo("Animal not found.")
                continue
            if choice == 2:
                _echo_commands(registry, animal)
            else:
                command = click.prompt("New command")
                registry.teach_command(animal, command)
                _report_save(registry)
                click.echo(f"Taught '{command}' to {animal.name}.")
        elif choice == 4:
            _echo_animals(registry)
        elif choice == 5:
            click.echo(f"Total animals: {registry.count()}")
        else:
            click.echo("Invalid choice, try again.")
