"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Connection profile (from ~/.cronopscfg)",
)

HostOpt = typer.Option(
    None,
    "--host",
    help="Scheduler service URL (overrides the profile and CRONOPS_HOST)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log requests and refreshes to stderr",
)

NameOpt = typer.Option(
    None,
    "--name",
    help="Regex on job name",
)

GroupOpt = typer.Option(
    None,
    "--group",
    "-g",
    help="Exact job group",
)

StatusOpt = typer.Option(
    None,
    "--status",
    help="Job status (e.g. RUNNING, PAUSED)",
)

UseOrOpt = typer.Option(
    False,
    "--or",
    help="Use OR instead of AND between selectors",
)

WideOpt = typer.Option(
    False,
    "--wide",
    help="Also show job ids and audit timestamps",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before sending the action",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show which jobs would be affected, but don't send anything",
)

JobNameOpt = typer.Option(
    ...,
    "--name",
    "-n",
    help="Job name",
)

JobGroupOpt = typer.Option(
    "DEFAULT",
    "--group",
    "-g",
    help="Job group",
)

DescriptionOpt = typer.Option(
    "",
    "--description",
    "-d",
    help="Free-form job description",
)

CronOpt = typer.Option(
    "0/1 * * * * ?",
    "--cron",
    "-c",
    help="Cron expression in the scheduler's trigger syntax",
)
