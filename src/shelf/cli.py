"""CLI interface for Shelf."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import click

from shelf.core.catalog import build_catalog
from shelf.models.file_record import CATEGORIES, FileRecord
from shelf.settings import DEFAULTS, Settings
from shelf.utils import bytes_to_human, format_relative_time
from shelf_ui.catalog.view import shown_total_size
from shelf_ui.client import BackendError, DBusBackend, LocalBackend
from shelf_ui.controller import WorkflowController
from shelf_ui.presenter import EchoPresenter
from shelf_ui.selection import TriState
from shelf_ui.state import EditorStatus, ViewState

_CATEGORY_CHOICE = click.Choice([c.id for c in CATEGORIES])

_TRI_MARKS = {
    TriState.CHECKED: "[x]",
    TriState.INDETERMINATE: "[-]",
    TriState.UNCHECKED: "[ ]",
}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@asynccontextmanager
async def _session(obj: dict, quiet: bool = False) -> AsyncIterator[WorkflowController]:
    """Open a backend, load the catalog and yield a ready controller."""
    if obj["remote"]:
        try:
            backend = await DBusBackend().connect()
        except BackendError as e:
            raise click.ClickException(str(e)) from e
    else:
        backend = LocalBackend(build_catalog(obj["root"]))

    controller = WorkflowController(
        backend,
        EchoPresenter(quiet=quiet),
        debounce_ms=Settings.instance().get_int("search.debounce_ms"),
    )
    try:
        if not await controller.load():
            raise click.exceptions.Exit(1)
        yield controller
    finally:
        if isinstance(backend, DBusBackend):
            backend.disconnect()


def _apply_filters(controller: WorkflowController, category: str | None, search: str | None) -> ViewState:
    if category:
        controller.store.set_category(category)
    if search:
        controller.set_search(search)
    return controller.view_state()


def _format_file(record: FileRecord, indent: str = "  ") -> None:
    ro_tag = click.style(" [read-only]", fg="yellow") if record.read_only else ""
    meta = f"{bytes_to_human(record.size):>9s}  {format_relative_time(record.mod_time):>10s}"
    click.echo(f"{indent}{click.style(record.label, fg='cyan', bold=True):40s}  {meta}{ro_tag}")
    click.echo(f"{indent}  {click.style(record.rel_path, fg='bright_black')}")


def _confirm_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(f"    {line}")
    click.echo()


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option(
    "--path",
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Scan this directory instead of the default locations",
)
@click.option("--remote", is_flag=True, help="Talk to a running 'shelf service start' over D-Bus")
@click.pass_context
def main(ctx: click.Context, verbose: int, root: Path | None, remote: bool) -> None:
    """Shelf: browse, edit and clean up Claude memory and config files."""
    _setup_logging(verbose)
    ctx.obj = {"root": root, "remote": remote}


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--category", "-c", default=None, type=_CATEGORY_CHOICE, help="Show one category")
@click.option("--search", "-s", default=None, help="Filter by name, path or project")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(obj: dict, category: str | None, search: str | None, as_json: bool) -> None:
    """List discovered files, newest first."""

    async def run() -> ViewState:
        async with _session(obj, quiet=as_json) as controller:
            return _apply_filters(controller, category, search)

    state = asyncio.run(run())

    if as_json:
        click.echo(json.dumps([f.to_dict() for f in state.files], indent=2))
        return

    badges = []
    for entry in state.categories:
        text = f"{entry.icon} {entry.label} ({entry.count})".strip()
        badges.append(click.style(text, fg="blue", bold=True) if entry.active else text)
    click.echo(f"\n  {'   '.join(badges)}\n")

    if not state.files:
        click.echo("  No files found.\n")
        return

    for record in state.files:
        _format_file(record)

    active = next((e for e in state.categories if e.active), None)
    size = active.total_size if active else shown_total_size(state.categories)
    click.echo(f"\n{len(state.files)} shown, {state.scan_info} ({bytes_to_human(size)})\n")


# ── show ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("file_id")
@click.pass_obj
def show(obj: dict, file_id: str) -> None:
    """Print the content of a file."""

    async def run() -> str | None:
        async with _session(obj) as controller:
            await controller.open_file(file_id)
            if controller.editor.status is not EditorStatus.READY:
                return None
            return controller.editor.content

    content = asyncio.run(run())
    if content is None:
        sys.exit(1)
    click.echo(content, nl=not content.endswith("\n"))


# ── delete-visible ───────────────────────────────────────────────────────

@main.command("delete-visible")
@click.option("--category", "-c", default=None, type=_CATEGORY_CHOICE, help="Restrict to one category")
@click.option("--search", "-s", default=None, help="Restrict to matching files")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete_visible(obj: dict, category: str | None, search: str | None, yes: bool) -> None:
    """Delete every writable file matching the filter."""

    async def run() -> bool:
        async with _session(obj) as controller:
            _apply_filters(controller, category, search)
            request = controller.request_delete_visible()
            if request is None:
                return False
            click.echo(f"\n{click.style(request.title, bold=True)}\n  {request.message}\n")
            _confirm_lines(request.file_lines)
            if not yes and not click.confirm("Delete these files?", default=False):
                controller.cancel_confirmation()
                click.echo("Aborted.")
                return True
            if not await controller.confirm():
                return False
            result = controller.last_bulk_result
            return result is not None and not result.errors

    if not asyncio.run(run()):
        sys.exit(1)


# ── cleanup ──────────────────────────────────────────────────────────────

@main.command()
@click.option("--yes", "-y", is_flag=True, help="Delete all suggestions without asking")
@click.option("--dry-run", is_flag=True, help="Show suggestions without deleting anything")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def cleanup(obj: dict, yes: bool, dry_run: bool, as_json: bool) -> None:
    """Find empty and stale files and delete the selected ones."""

    async def run() -> int:
        async with _session(obj, quiet=as_json) as controller:
            if not await controller.analyze_cleanup():
                return 1
            dialog = controller.cleanup
            if not dialog.result.items:
                if as_json:
                    click.echo(json.dumps({"status": "nothing_to_clean", "items": []}))
                else:
                    click.echo("Nothing to clean.")
                controller.close_cleanup()
                return 0

            if as_json and (dry_run or not yes):
                click.echo(json.dumps({"status": "dry_run", **dialog.result.to_dict()}, indent=2))
                return 0
            if not as_json:
                _print_cleanup(controller)
            if dry_run:
                click.echo("(dry run, no files were deleted)")
                return 0

            if not yes:
                choice = click.prompt("Delete selected? [y/N/select]", default="n", show_default=False)
                match choice.lower():
                    case "y" | "yes":
                        pass
                    case "select":
                        _interactive_exclude(controller)
                        if not dialog.selection.can_submit():
                            click.echo("Nothing selected.")
                            return 0
                        _print_cleanup(controller)
                        if not click.confirm("Delete selected?", default=False):
                            click.echo("Aborted.")
                            return 0
                    case _:
                        click.echo("Aborted.")
                        return 0

            if not await controller.confirm_cleanup():
                return 1
            result = controller.last_bulk_result
            if as_json:
                click.echo(json.dumps({"status": "cleaned", **result.to_dict()}, indent=2))
            return 1 if result.errors else 0

    code = asyncio.run(run())
    if code:
        sys.exit(code)


def _print_cleanup(controller: WorkflowController) -> None:
    """Grouped suggestions with their tri-state checkboxes."""
    dialog = controller.cleanup
    snap = dialog.selection.snapshot()
    click.echo(
        f"\n{_TRI_MARKS[snap.all_state]} {click.style('Select all', bold=True)}  "
        f"{snap.selected_count}/{snap.total_count} selected "
        f"({bytes_to_human(snap.selected_size)} of {bytes_to_human(snap.total_size)})"
    )
    index = 1
    for group in snap.groups:
        click.echo(
            f"\n  {_TRI_MARKS[group.state]} {click.style(group.key.heading, fg='blue', bold=True)} "
            f"({group.selected_count}/{len(group.item_ids)}, {bytes_to_human(group.total_size)})"
        )
        for item in dialog.selection.items_in(group.key):
            mark = _TRI_MARKS[dialog.selection.item_state(item.id)]
            click.echo(
                f"    {mark} [{index}] {item.record.label:35s} {item.reason_label} "
                f"{click.style(bytes_to_human(item.size), fg='bright_black')}"
            )
            index += 1
    click.echo()


def _interactive_exclude(controller: WorkflowController) -> None:
    """Let the user untick suggestions by number."""
    selection = controller.cleanup.selection
    ordered = [item for key in selection.group_keys for item in selection.items_in(key)]
    raw = click.prompt("Numbers to skip (comma-separated)", default="")
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            idx = int(part) - 1
            if 0 <= idx < len(ordered):
                controller.toggle_item(ordered[idx].id, False)


# ── rescan ───────────────────────────────────────────────────────────────

@main.command()
@click.pass_obj
def rescan(obj: dict) -> None:
    """Scan the filesystem again and report what was found."""

    async def run() -> bool:
        async with _session(obj) as controller:
            return await controller.rescan()

    if not asyncio.run(run()):
        sys.exit(1)


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Show or change persistent settings."""


@config.command("list")
def config_list() -> None:
    """Show every setting with its current value."""
    settings = Settings.instance()
    for key in DEFAULTS:
        click.echo(f"{key} = {json.dumps(settings.get(key))}")


@config.command("set")
@click.argument("key", type=click.Choice(list(DEFAULTS)))
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set KEY to VALUE. An empty VALUE resets scan.root."""
    match key:
        case "scan.root":
            parsed = str(Path(value).expanduser()) if value else None
        case _:
            try:
                parsed = int(value)
            except ValueError:
                raise click.BadParameter(f"{value!r} is not an integer", param_hint="VALUE")
            if parsed < 0:
                raise click.BadParameter("must not be negative", param_hint="VALUE")
    Settings.instance().set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
@click.pass_obj
def service_start(obj: dict) -> None:
    """Start the D-Bus service in foreground."""
    from shelf.dbus_service import start_service

    click.echo("Starting Shelf D-Bus service...")
    start_service(obj["root"])
