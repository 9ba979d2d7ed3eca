"""Root Typer application for the nxsite CLI."""

from __future__ import annotations

import logging

import typer

from nxsite.commands import site

app = typer.Typer(
    name="nxsite",
    help="Manage nginx virtual hosts: create from templates, enable, disable.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command()(site.create)
app.command()(site.enable)
app.command()(site.disable)
app.command(name="list")(site.list_sites)
app.command()(site.show)
app.command()(site.history)

if __name__ == "__main__":
    app()
