"""CLI application for the scheduler admin console."""

import typer

from cronops.cli.commands.jobs import app as jobs_app

app = typer.Typer(
    help="cronops - scheduler job console",
    no_args_is_help=True,
)

app.add_typer(jobs_app, name="jobs", help="List / create / edit / run / pause / resume / delete jobs.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
