import ast
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tripline._chain import expect
from tripline._config import Config, assert_config, configure_from_pyproject, find_pyproject_toml, load_config
from tripline._errors import AssertionFailure, ConfigError
from tripline._format import finalize_message, format_value

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
    no_pyproject: bool = typer.Option(default=False, help="Ignore [tool.tripline] in pyproject.toml"),
) -> None:
    """Tripline CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )

    if no_pyproject:
        return
    try:
        configure_from_pyproject()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _parse_literal(text: str) -> Any:
    """Parse a Python literal, text that is not a literal is used as a string."""
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError, MemoryError, RecursionError):
        logger.debug(f"Not a Python literal, using it as a string: {text!r}")
        return text


@app.command("format")
def format_command(
    value: Annotated[str, typer.Argument(help="Python literal to format, e.g. \"{'tea': 'chai'}\"")],
    *,
    max_props: Annotated[
        int | None,
        typer.Option("--max-props", min=0, help="Maximum number of entries shown per container"),
    ] = None,
    finalize: Annotated[
        bool,
        typer.Option("--finalize", help="Escape control characters in the output"),
    ] = False,
) -> None:
    """Print the formatted rendering of a value."""
    cfg = assert_config.clone()
    if max_props is not None:
        cfg.update(format={"max_props": max_props})
    if finalize:
        cfg.update(format={"finalize": True})

    rendered = finalize_message(cfg, format_value(cfg, _parse_literal(value)))
    out_console.print(rendered, markup=False, highlight=False)


@app.command()
def equal(
    left: Annotated[str, typer.Argument(help="Python literal for the actual value")],
    right: Annotated[str, typer.Argument(help="Python literal for the expected value")],
    *,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Require identical types"),
    ] = False,
) -> None:
    """Deep-compare two values, exit with status 1 if they differ."""
    actual = _parse_literal(left)
    expected = _parse_literal(right)

    chain = expect(actual).to.deep
    if strict:
        chain = chain.strictly
    try:
        chain.equal(expected)
    except AssertionFailure as e:
        err_console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(code=1) from e

    err_console.print("[green]✓ The values are deeply equal.[/green]")


def _display(value: Any) -> str:
    if callable(value):
        return getattr(value, "__qualname__", None) or repr(value)
    return repr(value)


def _options_table(cfg: Config) -> Table:
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Option", style="bold", no_wrap=True)
    table.add_column("Value")

    for name, field_value in cfg.options:
        if name == "format":
            continue
        table.add_row(escape(name), escape(_display(field_value)))
    for name, field_value in cfg.format:
        table.add_row(escape(f"format.{name}"), escape(_display(field_value)))
    return table


@app.command()
def config(
    pyproject: Annotated[
        Path | None,
        typer.Option("--pyproject", help="Path to pyproject.toml (searched upwards from the cwd by default)"),
    ] = None,
) -> None:
    """Show the effective assertion configuration."""
    if pyproject is not None and not pyproject.is_file():
        err_console.print(f"[red]✗ File not found: {escape(str(pyproject))}[/red]")
        raise typer.Exit(code=1)

    cfg = Config()
    source = pyproject if pyproject is not None else find_pyproject_toml()
    if source is not None:
        try:
            cfg.update(load_config(source).model_dump(exclude_unset=True))
        except ConfigError as e:
            err_console.print(f"[red]✗ {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e

    title = f"[bold]Configuration: {escape(str(source)) if source else 'defaults'}[/bold]"
    out_console.print(Panel(_options_table(cfg), title=title, border_style="cyan"))


if __name__ == "__main__":
    app()
