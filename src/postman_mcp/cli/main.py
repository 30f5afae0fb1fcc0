"""postman-mcp CLI entry point."""

import typer

from postman_mcp import __version__
from postman_mcp.cli.run_cmd import run
from postman_mcp.cli.serve_cmd import serve

app = typer.Typer(
    name="postman-mcp",
    help="MCP server for Postman collections and Newman runs",
    no_args_is_help=True,
)

# Register subcommands
app.command()(run)
app.command()(serve)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"postman-mcp {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """MCP server for Postman collections and Newman runs."""
