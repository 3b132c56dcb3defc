"""Command line interface for symtag."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, NoReturn

import click
import yaml
from rich.columns import Columns
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from symtag.config import (
    ConfigError,
    ConfigManager,
    SymtagConfig,
    assign_nested,
    resolve_with_precedence,
)
from symtag.index import TagIndexError, TagState, printable_name
from symtag.scanning import ScanError
from symtag.session import TagSession
from symtag.tagging import ItemFailure, TagCreationError, ToggleAction, ToggleResult

console = Console()

HELP_TEXT = """\
The browser shows two numbered lists: items (left) and tags (right).

Select items and the tags list shows which tags apply to the selection:
[X] every selected item has the tag, [ ] none has it, [?] only some do.

Toggling a tag adds it to every selected item when none has it and removes
it from every selected item when all have it. Mixed tags ([?]) are left
alone: deselect items until the tag is uniform, then toggle again.

Commands:
s N [N...]  select/deselect items by number
c           clear the selection
t N [N...]  toggle each tag N on the selected items
+ NAME      create a new tag (use / for nested tags)
e [CMD]     open the selected items with CMD
/ [TEXT]    only show items whose name contains TEXT (no TEXT: show all)
r           rescan the items and tags directories
h, ?        show this help
q           quit
"""

_MARKS = {TagState.OFF: "[ ]", TagState.ON: "[X]", TagState.MIXED: "[?]"}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    message = printable_name(message)
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, quiet: bool) -> None:
    """Print ``message`` unless quiet mode is active."""
    if quiet:
        return
    console.print(message, soft_wrap=True)


def _emit_failures(failures: Iterable[ItemFailure], *, heading: str) -> None:
    failures = list(failures)
    if not failures:
        return
    console.print(f"[red]{escape(heading)}[/red]")
    for failure in failures:
        console.print(
            f"  - {escape(printable_name(failure.display_name))}: "
            f"{escape(printable_name(failure.message))}",
            soft_wrap=True,
        )


def _load_config() -> SymtagConfig:
    """Load configuration and apply its logging level.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    try:
        config = ConfigManager().load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    logging.basicConfig(level=config.logging.level, format="[%(levelname)s] %(name)s: %(message)s")
    logging.getLogger().setLevel(config.logging.level)
    return config


def _open_session(
    config: SymtagConfig,
    items: str | None,
    tags: str | None,
    *,
    json_output: bool = False,
) -> TagSession:
    items_root = Path(items or config.paths.items_root)
    tags_root = Path(tags or config.paths.tags_root)
    try:
        return TagSession.open(items_root, tags_root)
    except (ScanError, TagIndexError) as exc:
        _handle_cli_error(str(exc), code="scan_error", json_output=json_output, original=exc)


def _root_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--tags",
        "tags_dir",
        type=click.Path(file_okay=False, path_type=str),
        help="Tags directory (defaults to configuration, 'tags').",
    )(func)
    func = click.option(
        "--items",
        "items_dir",
        type=click.Path(file_okay=False, path_type=str),
        help="Items directory (defaults to configuration, 'all').",
    )(func)
    return func


def _describe_toggle(result: ToggleResult, tag_name: str) -> str:
    """Return a user-facing summary of a toggle."""
    name = escape(tag_name)
    if result.action is ToggleAction.NONE:
        return "[yellow]Select at least one item before toggling a tag.[/yellow]"
    if result.action is ToggleAction.MIXED:
        return f"[yellow]Tag '{name}' is mixed across the selection; no action taken.[/yellow]"
    verb = "Added" if result.action is ToggleAction.ADDED else "Removed"
    preposition = "to" if result.action is ToggleAction.ADDED else "from"
    return f"[green]{verb} '{name}' {preposition} {len(result.changed)} item(s).[/green]"


def _toggle_payload(result: ToggleResult, session: TagSession) -> dict[str, Any]:
    tag = session.index.tag(result.tag_id)
    return {
        "tag": tag.label,
        "action": result.action.value,
        "changed": [session.index.item(item_id).label for item_id in result.changed],
        "failures": [
            {
                "item_id": printable_name(str(failure.item_id)),
                "display_name": printable_name(failure.display_name),
                "message": printable_name(failure.message),
            }
            for failure in result.failures
        ],
    }


def _status_payload(session: TagSession) -> dict[str, Any]:
    index = session.index
    return {
        "items_root": printable_name(str(session.items_root)),
        "tags_root": printable_name(str(session.tags_root)),
        "items": [
            {
                "name": item.label,
                "path": printable_name(str(item.id)),
                "tags": sorted(index.tag(tag_id).label for tag_id in item.tags),
            }
            for item in index.sorted_items()
        ],
        "tags": [
            {
                "name": tag.label,
                "path": printable_name(str(tag.id)),
                "items": sorted(item.label for item in index.items_for_tag(tag.id)),
            }
            for tag in index.sorted_tags()
        ],
    }


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="symtag")
def cli() -> None:
    """symtag tags files with directories of relative symlinks.

    Every subdirectory of the tags directory is a tag; a symlink inside it
    marks the item it points to as tagged.
    """


@cli.command()
@_root_options
def browse(items_dir: str | None, tags_dir: str | None) -> None:
    """Browse items and toggle tags interactively.

    Args:
        items_dir: Items directory; prompted for when omitted.
        tags_dir: Tags directory; prompted for when omitted.
    """
    config = _load_config()
    session = _prompt_session(config, items_dir, tags_dir)
    if config.cli.show_help_on_start:
        console.print(escape(HELP_TEXT))

    while True:
        _render(session)
        line = click.prompt("symtag", default="", show_default=False, prompt_suffix="> ")
        command, _, argument = line.strip().partition(" ")
        argument = argument.strip()
        if command in {"q", "quit"}:
            return
        handler = _BROWSER_COMMANDS.get(command)
        if handler is None:
            if command:
                console.print(f"[yellow]Unknown command {escape(command)!r}; try 'h'.[/yellow]")
            continue
        handler(session, argument, config)


def _prompt_session(config: SymtagConfig, items: str | None, tags: str | None) -> TagSession:
    """Ask for the roots until both can be scanned."""
    while True:
        items_root = items or click.prompt("Items directory", default=config.paths.items_root)
        tags_root = tags or click.prompt("Tags directory", default=config.paths.tags_root)
        try:
            return TagSession.open(Path(items_root), Path(tags_root))
        except (ScanError, TagIndexError) as exc:
            console.print(f"[red]{escape(printable_name(str(exc)))}[/red]", soft_wrap=True)
            items = tags = None


def _render(session: TagSession) -> None:
    items_table = Table(title="Items", title_justify="left")
    items_table.add_column("#", justify="right")
    items_table.add_column("Item")
    for number, (item, selected) in enumerate(session.item_rows(), start=1):
        mark = "[X]" if selected else "[ ]"
        items_table.add_row(str(number), escape(f"{mark} {item.label}"))

    tags_table = Table(title="Tags", title_justify="left")
    tags_table.add_column("#", justify="right")
    tags_table.add_column("Tag")
    for number, (tag, state) in enumerate(session.tag_rows(), start=1):
        tags_table.add_row(str(number), escape(f"{_MARKS[state]} {tag.label}"))

    console.print(Columns([items_table, tags_table]))
    summary = f"{len(session.selection)} selected"
    if session.filter_text:
        summary += f", filter: {escape(printable_name(session.filter_text))}"
    console.print(f"[dim]{summary}[/dim]")


def _parse_numbers(argument: str, limit: int) -> list[int] | None:
    numbers: list[int] = []
    for token in argument.split():
        if not token.isdecimal() or not 1 <= int(token) <= limit:
            console.print(f"[yellow]No entry numbered {escape(token)}.[/yellow]")
            return None
        numbers.append(int(token) - 1)
    if not numbers:
        console.print("[yellow]Give at least one number.[/yellow]")
        return None
    return numbers


def _cmd_select(session: TagSession, argument: str, config: SymtagConfig) -> None:
    rows = session.item_rows()
    numbers = _parse_numbers(argument, len(rows))
    for number in numbers or []:
        session.toggle_item(rows[number][0].id)


def _cmd_clear(session: TagSession, argument: str, config: SymtagConfig) -> None:
    session.clear_selection()


def _cmd_toggle(session: TagSession, argument: str, config: SymtagConfig) -> None:
    rows = session.tag_rows()
    numbers = _parse_numbers(argument, len(rows))
    for number in dict.fromkeys(numbers or []):
        tag = rows[number][0]
        result = session.toggle_tag(tag.id)
        console.print(_describe_toggle(result, tag.label))
        _emit_failures(result.failures, heading="Some items could not be changed:")


def _cmd_new_tag(session: TagSession, argument: str, config: SymtagConfig) -> None:
    name = argument or click.prompt("New tag", default="", show_default=False)
    try:
        tag = session.create_tag(name)
    except TagCreationError as exc:
        console.print(f"[red]{escape(printable_name(str(exc)))}[/red]", soft_wrap=True)
        return
    if tag is not None:
        console.print(f"[green]Tag '{escape(tag.label)}' is ready.[/green]")


def _cmd_open(session: TagSession, argument: str, config: SymtagConfig) -> None:
    if not session.selection:
        console.print("[yellow]Select at least one item to open.[/yellow]")
        return
    command = argument or click.prompt(
        "Open selection with", default=config.launcher.command or "", show_default=False
    )
    try:
        result = session.open_selection(command)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return
    if result.launched:
        console.print(f"[green]Opened {len(result.launched)} item(s).[/green]")
    _emit_failures(result.failures, heading="Some items could not be opened:")


def _cmd_filter(session: TagSession, argument: str, config: SymtagConfig) -> None:
    session.set_filter(argument)


def _cmd_rescan(session: TagSession, argument: str, config: SymtagConfig) -> None:
    try:
        session.rescan()
    except (ScanError, TagIndexError) as exc:
        console.print(f"[red]{escape(printable_name(str(exc)))}[/red]", soft_wrap=True)


def _cmd_help(session: TagSession, argument: str, config: SymtagConfig) -> None:
    console.print(escape(HELP_TEXT))


_BROWSER_COMMANDS: dict[str, Callable[[TagSession, str, SymtagConfig], None]] = {
    "s": _cmd_select,
    "c": _cmd_clear,
    "t": _cmd_toggle,
    "+": _cmd_new_tag,
    "e": _cmd_open,
    "/": _cmd_filter,
    "r": _cmd_rescan,
    "h": _cmd_help,
    "?": _cmd_help,
}


@cli.command()
@_root_options
@click.option("--json", "json_output", is_flag=True, help="Emit the index as JSON.")
def status(items_dir: str | None, tags_dir: str | None, json_output: bool) -> None:
    """Show every tag with its items and every item with its tags."""
    config = _load_config()
    session = _open_session(config, items_dir, tags_dir, json_output=json_output)
    payload = _status_payload(session)

    if json_output:
        console.print_json(data=payload)
        return

    table = Table(title="Tags", title_justify="left")
    table.add_column("Tag")
    table.add_column("Items")
    for tag in payload["tags"]:
        table.add_row(escape(tag["name"]), escape(", ".join(tag["items"])) or "-")
    console.print(table)

    untagged = [item["name"] for item in payload["items"] if not item["tags"]]
    console.print(
        f"{len(payload['items'])} item(s), {len(payload['tags'])} tag(s), "
        f"{len(untagged)} untagged."
    )


@cli.command()
@click.argument("tag")
@click.argument("names", nargs=-1, required=True)
@_root_options
@click.option("--json", "json_output", is_flag=True, help="Emit the toggle outcome as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def toggle(
    tag: str,
    names: tuple[str, ...],
    items_dir: str | None,
    tags_dir: str | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Toggle TAG on the items named NAMES.

    The tag is added when none of the items has it and removed when all of
    them have it; a mixed selection changes nothing and exits with an error.
    """
    config = _load_config()
    quiet = quiet or config.cli.quiet_default
    session = _open_session(config, items_dir, tags_dir, json_output=json_output)

    try:
        target = session.find_tag(tag)
        for name in dict.fromkeys(names):
            session.selection.add(session.find_item(name).id)
    except TagIndexError as exc:
        _handle_cli_error(str(exc), code="unknown_entry", json_output=json_output, original=exc)

    result = session.toggle_tag(target.id)
    payload = _toggle_payload(result, session)

    if result.action is ToggleAction.MIXED:
        _handle_cli_error(
            f"Tag '{target.label}' is mixed across the selection; no action taken.",
            code="mixed_selection",
            json_output=json_output,
            details=payload,
        )
    if json_output:
        console.print_json(data=payload)
        if not result.ok:
            raise SystemExit(1)
        return

    _emit_message(_describe_toggle(result, target.label), quiet=quiet)
    if not result.ok:
        _emit_failures(result.failures, heading="Some items could not be changed:")
        raise click.ClickException(f"{len(result.failures)} item(s) failed.")


@cli.command("new-tag")
@click.argument("name")
@_root_options
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def new_tag(name: str, items_dir: str | None, tags_dir: str | None, quiet: bool) -> None:
    """Create the tag NAME (nested names like fruit/citrus are allowed)."""
    config = _load_config()
    quiet = quiet or config.cli.quiet_default
    session = _open_session(config, items_dir, tags_dir)

    try:
        tag = session.create_tag(name)
    except TagCreationError as exc:
        raise click.ClickException(printable_name(str(exc))) from exc
    if tag is None:
        raise click.ClickException("Tag name must not be empty.")
    _emit_message(f"[green]Tag '{escape(tag.label)}' is ready.[/green]", quiet=quiet)


@cli.command()
@_root_options
@click.option("--json", "json_output", is_flag=True, help="Emit problems as JSON.")
def check(items_dir: str | None, tags_dir: str | None, json_output: bool) -> None:
    """Verify that the index and the symlinks on disk agree."""
    config = _load_config()
    session = _open_session(config, items_dir, tags_dir, json_output=json_output)
    problems = [printable_name(problem) for problem in session.index.check_invariants()]

    if json_output:
        console.print_json(data={"problems": problems})
        if problems:
            raise SystemExit(1)
        return

    if not problems:
        console.print("[green]No problems found.[/green]")
        return
    for problem in problems:
        console.print(f"[red]- {escape(problem)}[/red]", soft_wrap=True)
    raise click.ClickException(f"{len(problems)} problem(s) found.")


@cli.group()
def config() -> None:
    """Manage symtag configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'paths.items_root'.")

    try:
        parsed_value = yaml.safe_load(value)
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=SymtagConfig(), file_overrides=file_data)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    diff = difflib.unified_diff(
        before,
        manager.read_text().splitlines(),
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an editor and validate the result."""
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes applied.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=SymtagConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
