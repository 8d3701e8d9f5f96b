from __future__ import annotations

import click
from flask import Flask

from ..container import Container
from ..core.enums import SyncOutcome

ALL_SOURCES = "all"

_METRICS = [
    ("Records Fetched", "fetched"),
    ("Check-ins Created", "check_ins"),
    ("Check-outs Created", "check_outs"),
    ("Skipped (duplicates)", "skipped"),
    ("Employees Not Found", "employees_not_found"),
    ("Employees Created", "employees_created"),
    ("Errors", "errors"),
]


def _print_table(stats: dict) -> None:
    width = max(len(label) for label, _ in _METRICS)
    click.echo(f"{'Metric'.ljust(width)}  Count")
    click.echo(f"{'-' * width}  -----")
    for label, key in _METRICS:
        click.echo(f"{label.ljust(width)}  {stats.get(key, 0)}")


def register(app: Flask, container: Container) -> None:
    choices = [*container.sync_services.keys(), ALL_SOURCES]

    @app.cli.command("sync")
    @click.argument("source", type=click.Choice(choices), default=ALL_SOURCES)
    @click.option("--since", type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%d %H:%M:%S"]), default=None,
                  help="Sync records since this date (Y-m-d).")
    @click.option("--full", is_flag=True, help="Ignore the last sync watermark.")
    @click.option("--test", "test_only", is_flag=True, help="Test connection only, do not sync.")
    def sync_command(source: str, since, full: bool, test_only: bool) -> None:
        """Sync punch events from external databases into attendance tables."""
        names = list(container.sync_services) if source == ALL_SOURCES else [source]
        if not names:
            raise click.ClickException("No attendance source is configured.")

        exit_code = 0
        for name in names:
            service = container.sync_services[name]

            if test_only:
                click.echo(f"Testing {name} connection...")
                if service.test_connection():
                    click.echo("Connection successful!")
                else:
                    click.echo("Connection failed. Check your .env configuration.", err=True)
                    exit_code = 1
                continue

            if since is not None:
                click.echo(f"[{name}] Syncing records since: {since:%Y-%m-%d %H:%M:%S}")
            elif full:
                click.echo(f"[{name}] Performing full sync.")
            else:
                watermark = service.last_watermark()
                if watermark:
                    click.echo(f"[{name}] Resuming from last sync: {watermark:%Y-%m-%d %H:%M:%S}")
                else:
                    click.echo(f"[{name}] No previous sync found. Performing full sync.")

            result = service.sync(since, full=full)
            if result.outcome is SyncOutcome.CONNECTIVITY_FAILED:
                click.echo(f"[{name}] Cannot connect: {result.message}", err=True)
                exit_code = 1
                continue

            click.echo(f"[{name}] Sync completed!")
            _print_table(result.stats.as_dict())
            if result.stats.errors > 0:
                click.echo(f"[{name}] Some records had errors. Check the log for details.", err=True)
                exit_code = 1

        raise SystemExit(exit_code)
