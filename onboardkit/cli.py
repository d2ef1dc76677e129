"""Command line interface for managing onboarding drafts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from onboardkit.config import OnboardingConfig, load_config, save_config
from onboardkit.drafts import get_draft_store
from onboardkit.errors import OnboardingError
from onboardkit.portable import export_draft, import_draft
from onboardkit.records import get_record_library

app = typer.Typer(help="CLI for onboarding drafts")

# Command groups
draft_app = typer.Typer(help="Commands for managing in-progress drafts")
record_app = typer.Typer(help="Commands for browsing finalized records")

app.add_typer(draft_app, name="draft")
app.add_typer(record_app, name="record")

_state: dict = {"config_path": None}


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to config.yaml (default: ONBOARDKIT_CONFIG or data dir)"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """onboardkit CLI entry point."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _state["config_path"] = config


def _config() -> OnboardingConfig:
    return load_config(_state["config_path"])


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@draft_app.command("new")
def draft_new(first_name: str, last_name: str) -> None:
    """
    Create a new draft for an employee.

    The email address and domain username are suggested from the name using
    the configured customer naming convention.

    Example:
        onboardkit draft new Jane Smith
        # Output: Created draft 5b1c...  Smith, Jane  jsmith@example.com
    """
    if not first_name.strip() or not last_name.strip():
        _fail("Both first and last name are required")
    store = get_draft_store(_config())
    record = store.create(first_name.strip(), last_name.strip())
    typer.echo(f"Created draft {record.record_id}\t{record.display_name}\t{record.email_address}")


@draft_app.command("list")
def draft_list() -> None:
    """
    List local drafts, most recently modified first.

    Index entries whose draft file has disappeared are removed as a side
    effect of listing.

    Example:
        onboardkit draft list
        # Output: 5b1c...    Smith, Jane    2026-02-22 10:15    page 3
    """
    store = get_draft_store(_config())
    entries = store.list_all()
    if not entries:
        typer.echo("No drafts found")
        return
    for entry in entries:
        modified = entry.last_modified.astimezone().strftime("%Y-%m-%d %H:%M")
        typer.echo(
            f"{entry.record_id}\t{entry.employee_name}\t{modified}\tpage {entry.last_page_index + 1}"
        )


@draft_app.command("show")
def draft_show(record_id: str) -> None:
    """Show the stored content of one draft."""
    store = get_draft_store(_config())
    try:
        record = store.load(record_id)
    except OnboardingError as exc:
        _fail(str(exc))
    if record is None:
        _fail("Draft not found")
    typer.echo(f"Draft {record.record_id}: {record.display_name} ({record.status})")
    typer.echo(record.to_json())


@draft_app.command("delete")
def draft_delete(
    record_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete a draft and its index entry."""
    if not yes and not typer.confirm(f"Delete draft {record_id}?"):
        raise typer.Exit(code=1)
    store = get_draft_store(_config())
    try:
        store.delete(record_id)
    except OnboardingError as exc:
        _fail(f"Failed to delete draft: {exc}")
    typer.echo(f"Deleted draft {record_id}")


@draft_app.command("export")
def draft_export(
    record_id: str,
    dest: Optional[Path] = typer.Option(
        None, "--dest", help="Destination directory (default: last used export directory)"
    ),
) -> None:
    """
    Export a draft as a portable zip archive.

    Example:
        onboardkit draft export 5b1c... --dest ./transfer
        # Output: Exported to transfer/Onboarding_Draft_Smith_Jane_20260222.zip
    """
    config = _config()
    destination = dest or Path(config.settings.last_draft_export_directory or Path.cwd())
    store = get_draft_store(config)
    try:
        archive = export_draft(store, record_id, destination)
    except OnboardingError as exc:
        _fail(f"Export failed: {exc}")
    config.settings.last_draft_export_directory = str(destination.resolve())
    save_config(config, _state["config_path"])
    typer.echo(f"Exported to {archive}")


@draft_app.command("import")
def draft_import(archive: Path) -> None:
    """Import a portable zip archive as a new local draft."""
    config = _config()
    store = get_draft_store(config)
    try:
        record = import_draft(store, archive)
    except OnboardingError as exc:
        _fail(f"Import failed: {exc}")
    config.settings.last_draft_import_directory = str(archive.resolve().parent)
    save_config(config, _state["config_path"])
    typer.echo(f"Imported draft {record.record_id}\t{record.display_name}")


@draft_app.command("reconcile")
def draft_reconcile() -> None:
    """Rebuild the draft index from the draft files on disk."""
    store = get_draft_store(_config())
    report = store.reconcile()
    typer.echo(
        f"Removed {len(report.removed)}, added {len(report.added)}, skipped {len(report.skipped)}"
    )
    for path in report.skipped:
        typer.secho(f"Skipped unreadable draft file: {path}", fg=typer.colors.YELLOW)


@record_app.command("list")
def record_list() -> None:
    """List finalized records and whether their exported files were found."""
    library = get_record_library(_config())
    entries = library.list_all()
    if not entries:
        typer.echo("No records found")
        return
    for entry in entries:
        status = "ok" if entry.last_verified else "missing"
        typer.echo(f"{entry.record_id}\t{entry.employee_name}\t{entry.department}\t{status}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
