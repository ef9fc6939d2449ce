import sys
from importlib.metadata import (
    version as get_version,
)
from typing import (
    IO,
)

import click

from .loader import (
    SchemaError,
    parse_schema,
)
from .naming import (
    DEFAULT_GUARD,
    NamingPolicy,
)
from .ordering import (
    StructCycleError,
)
from .writer import (
    HeaderWriter,
)

__version__ = get_version("webgpu-headergen")


def _debug_print(msg: str) -> None:
    """Print debug message to stderr."""
    print(f"[headergen] {msg}", file=sys.stderr)


def translate(
    code: str,
    guard: str = DEFAULT_GUARD,
    debug: bool = False,
) -> str:
    """Generate a C header from a WebGPU XML schema.

    Args:
        code: XML schema document.
        guard: Include guard symbol for the generated header.
        debug: Print debug info to stderr.

    Returns:
        C header contents.

    Raises:
        SchemaError: If the document is malformed.
        StructCycleError: If structs embed each other in a cycle.
    """
    schema = parse_schema(code)

    if debug:
        _debug_print(f"Prefix: {schema.prefix}")
        _debug_print(f"Loaded {schema}")

    writer = HeaderWriter(schema, NamingPolicy(schema.prefix, guard))

    if debug:
        _debug_print(f"Struct order: {', '.join(writer.struct_order)}")

    return writer.write()


CONTEXT_SETTINGS: dict[str, list[str]] = dict(help_option_names=["-h", "--help"])


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="Generate a C header from a WebGPU XML schema.",
)
@click.option("--version", "-v", is_flag=True, help="Print version and exit.")
@click.option(
    "--guard",
    default=DEFAULT_GUARD,
    show_default=True,
    metavar="<symbol>",
    help="Include guard symbol.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Print debug info to stderr.",
)
@click.argument(
    "infile",
    type=click.File("r"),
    required=False,
)
@click.argument(
    "outfile",
    type=click.File("w"),
    default="-",
)
def cli(
    version: bool,
    guard: str,
    debug: bool,
    infile: IO[str] | None,
    outfile: IO[str],
) -> None:
    if version:
        print(__version__)
        return

    if infile is None:
        click.echo("Error: Missing argument 'INFILE'.", err=True)
        raise SystemExit(2)

    if debug:
        _debug_print(f"Reading: {infile.name}")

    try:
        header = translate(infile.read(), guard=guard, debug=debug)
    except (SchemaError, StructCycleError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e

    outfile.write(header)
