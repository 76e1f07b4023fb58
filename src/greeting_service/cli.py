"""CLI adapter for ``greeting_service`` built on ``lib_cli_exit_tools``.

Purpose
-------
Run the greeting service and inspect the configuration it would resolve
without writing Python.

Contents
--------
* :func:`cli` – root group wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_serve` – start the HTTP service (plus the optional poller).
* :func:`cli_hello` – print the greeting the service would return right now.
* :func:`cli_read_config` – print the merged configuration as JSON.
* :func:`cli_env_prefix` / :func:`cli_info` – small diagnostics.
* :func:`main` – console-script entry point.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.refresh.polling import PollingRefresher
from .core import DEFAULT_APP, DEFAULT_SLUG, DEFAULT_VENDOR, build_service, read_config, read_config_raw
from .core import default_env_prefix as _default_env_prefix
from .domain.settings import ServerSettings
from .observability import configure_console_logging, log_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
PROG_NAME: Final[str] = "greeting-service"
DISTRIBUTION: Final[str] = "greeting-service"
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

LOG_LEVEL_CHOICES: Final[tuple[str, ...]] = ("debug", "info", "warning", "error")


def _resolve_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _source_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options naming which layered configuration to resolve."""

    options = [
        click.option("--vendor", default=DEFAULT_VENDOR, show_default=True, help="Vendor namespace (macOS/Windows paths)"),
        click.option("--app", default=DEFAULT_APP, show_default=True, help="Application name (macOS/Windows paths)"),
        click.option("--slug", default=DEFAULT_SLUG, show_default=True, help="Slug for Linux paths and the env prefix"),
        click.option(
            "--prefer",
            multiple=True,
            help="Preferred file suffix ordering for config.d entries (repeatable)",
        ),
        click.option(
            "--start-dir",
            type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True, readable=True),
            default=None,
            help="Starting directory for .env upward search (defaults to CWD)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(
    help="Greeting service with refreshable layered configuration",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=PROG_NAME,
    message="greeting-service version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Store the traceback preference for ``lib_cli_exit_tools``."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        click.echo(f"{DISTRIBUTION} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', DISTRIBUTION)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug", default=DEFAULT_SLUG)
def cli_env_prefix(slug: str) -> None:
    """Print the environment variable prefix used for *slug*."""

    click.echo(_default_env_prefix(slug))


@cli.command("hello", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
def cli_hello(vendor: str, app: str, slug: str, prefer: Sequence[str], start_dir: Optional[Path]) -> None:
    """Print the greeting ``GET /hello`` would return with the current configuration."""

    service = build_service(
        vendor=vendor,
        app=app,
        slug=slug,
        prefer=_normalize_prefer(prefer),
        start_dir=str(start_dir) if start_dir is not None else None,
    )
    click.echo(service.hello())


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include provenance metadata for each key in the output",
)
def cli_read_config(
    vendor: str,
    app: str,
    slug: str,
    prefer: Sequence[str],
    start_dir: Optional[Path],
    indent: Optional[int],
    provenance: bool,
) -> None:
    """Load layered configuration and print the result as JSON."""

    kwargs = {
        "vendor": vendor,
        "app": app,
        "slug": slug,
        "prefer": _normalize_prefer(prefer),
        "start_dir": str(start_dir) if start_dir is not None else None,
    }
    if provenance:
        data, meta = read_config_raw(**kwargs)
        click.echo(json.dumps({"config": data, "provenance": meta}, indent=indent, separators=(",", ":")))
        return
    click.echo(read_config(**kwargs).to_json(indent=indent))


@cli.command("serve", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
@click.option("--host", default=None, help="Bind address (overrides server.host)")
@click.option("--port", type=int, default=None, help="Bind port (overrides server.port)")
@click.option(
    "--refresh-interval",
    type=float,
    default=None,
    help="Poll configuration every N seconds; 0 disables polling (overrides refresh.interval)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    default="info",
    show_default=True,
)
def cli_serve(
    vendor: str,
    app: str,
    slug: str,
    prefer: Sequence[str],
    start_dir: Optional[Path],
    host: Optional[str],
    port: Optional[int],
    refresh_interval: Optional[float],
    log_level: str,
) -> None:
    """Serve ``GET /hello``, ``POST /actuator/refresh`` and ``GET /actuator/health``."""

    configure_console_logging(getattr(logging, log_level.upper()))
    service = build_service(
        vendor=vendor,
        app=app,
        slug=slug,
        prefer=_normalize_prefer(prefer),
        start_dir=str(start_dir) if start_dir is not None else None,
    )
    settings = _apply_overrides(service.settings, host=host, port=port, refresh_interval=refresh_interval)
    poller = PollingRefresher(service.refresher, settings.refresh_interval) if settings.refresh_interval > 0 else None
    if poller is not None:
        poller.start()
    log_info("serving", layer="service", path=None, host=settings.host, port=settings.port)
    try:
        service.app.run(host=settings.host, port=settings.port, threaded=True, use_reloader=False)
    finally:
        if poller is not None:
            poller.stop()


def _apply_overrides(settings: ServerSettings, **overrides: Any) -> ServerSettings:
    """Return *settings* with every non-``None`` override applied."""

    changes = {key: value for key, value in overrides.items() if value is not None}
    if changes.get("refresh_interval", 0) < 0:
        raise click.BadParameter("must not be negative", param_hint="--refresh-interval")
    return replace(settings, **changes) if changes else settings


def _normalize_prefer(values: Sequence[str]) -> Optional[Sequence[str]]:
    """Normalise preferred suffixes to lowercase tuples without leading dots."""

    if not values:
        return None
    return tuple(value.lower().lstrip(".") for value in values)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=PROG_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
