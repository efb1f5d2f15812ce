"""Main Typer CLI application for georeferencing tools."""

import logging

import typer

app = typer.Typer(
    help="Convert between pixel, projected and longitude/latitude coordinates of georeferenced images",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Georeferencing tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


def _register_commands() -> None:
    """
    Import command modules to register commands with the app.

    Commands use decorators like @app.command() which register themselves
    when the module is imported.
    """
    from raster_georef.cli import convert, info

    # Avoid "imported but unused" warnings by explicitly using the module
    _ = convert
    _ = info


_register_commands()


if __name__ == "__main__":
    app()
