"""Initialize default inventory types and units."""

import click
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.reference import ReferenceDataService


INITIAL_TYPES = ["Article", "Assembly", "Service"]

# (abbreviation, name)
INITIAL_UNITS = [
    ("act", "Act"),
    ("pill", "Pillule"),
    ("box", "Box"),
    ("lot", "Lot"),
    ("amp", "Ampoule"),
    ("bags", "Bags"),
    ("btl", "Bottle"),
    ("cap", "Capsule"),
    ("tab", "Tablet"),
    ("kg", "Kilogram"),
    ("l", "Liter"),
    ("pcs", "Pieces"),
]


@click.command("init-reference")
@click.option("--force", is_flag=True, help="Add missing defaults even if reference data exists")
@click.pass_context
def init_reference(ctx, force: bool):
    """Initialize database with default inventory types and units."""
    db = ctx.obj["db"]
    service = ReferenceDataService(db)

    if (service.list_types() or service.list_units()) and not force:
        click.echo("Reference data already exists. Use --force to add missing defaults.")
        return

    existing_types = {t.text for t in service.list_types()}
    existing_units = {u.text for u in service.list_units()}

    created = 0
    errors = 0

    for text in INITIAL_TYPES:
        if text in existing_types:
            continue
        try:
            service.create_type(text)
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create type '{text}': {e}", err=True)
            errors += 1

    for abbr, text in INITIAL_UNITS:
        if text in existing_units:
            continue
        try:
            service.create_unit(abbr, text)
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create unit '{text}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} reference records.")
    else:
        click.echo(f"Created {created} reference records with {errors} errors.")


def register_commands(cli):
    """Register init-reference command with main CLI."""
    cli.add_command(init_reference)
