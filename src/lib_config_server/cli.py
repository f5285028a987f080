"""CLI adapter for ``lib_config_server`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators resolve a coordinate against the configured backend from a
shell, printing exactly the JSON body the HTTP layer would return. Useful for
checking a new project layout or a backend credential without deploying the
service.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command storing the global traceback preference in
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_configs` / :func:`cli_certs` / :func:`cli_files` – resolve one
  category via :func:`lib_config_server.core.fetch`.
* :func:`cli_search` – list services via :func:`lib_config_server.core.search`.
* :func:`cli_repo_name` – show the Git repository name for a project/environment.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It loads :class:`Settings`, asks the
composition root for a provider, and never reaches into adapter internals
except for the pure repository-name builder. ``lib_cli_exit_tools`` centralises
the exit code strategy so every command reports failures the same way.
"""

from __future__ import annotations

import json
import sys
from contextlib import closing
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.path_builders.default import git_repository_name
from .core import create_provider, fetch, search
from .domain.models import Category, Coordinate
from .settings import load_settings

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_config_server")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Resolve configs, certificates and files for a service coordinate",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_server",
    message="lib_config_server version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color`` which :func:`main`
        reads when formatting exceptions.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_server")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_server (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_server')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


def _settings_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--settings",
        "settings_path",
        type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
        default=None,
        help="Settings file (TOML/YAML/JSON); CONFIG_SERVER_* variables override it",
    )(func)


def _authorization_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--authorization",
        envvar="CONFIG_SERVER_AUTHORIZATION",
        default=None,
        help="Authorization header value forwarded to the backend (e.g. 'Basic ...', 'Bearer ...')",
    )(func)


def _coordinate_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = (
        click.option("--project-name", required=True, help="Project owning the configuration"),
        click.option("--project-version", required=True, help="Project version used by the globals scope"),
        click.option("--service-name", required=True, help="Service whose overrides apply"),
        click.option("--service-version", required=True, help="Service version used by the service scope"),
        click.option("--environment", required=True, help="Deployment environment (dev, qa, prod, ...)"),
        click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size"),
    )
    for option in reversed(options):
        func = option(func)
    return func


def _run_fetch(category: Category, settings_path: Optional[Path], authorization: Optional[str], indent: Optional[int], **fields: str) -> None:
    with closing(create_provider(load_settings(settings_path))) as provider:
        result = fetch(provider, category, authorization, Coordinate(**fields))
    click.echo(result.to_json(indent=indent))


@cli.command("configs", context_settings=CLICK_CONTEXT_SETTINGS)
@_settings_option
@_authorization_option
@_coordinate_options
def cli_configs(
    settings_path: Optional[Path],
    authorization: Optional[str],
    indent: Optional[int],
    project_name: str,
    project_version: str,
    service_name: str,
    service_version: str,
    environment: str,
) -> None:
    """Print merged configuration properties as JSON.

    Service values override globals values key by key.
    """

    _run_fetch(
        Category.CONFIGS,
        settings_path,
        authorization,
        indent,
        project_name=project_name,
        project_version=project_version,
        service_name=service_name,
        service_version=service_version,
        environment=environment,
    )


@cli.command("certs", context_settings=CLICK_CONTEXT_SETTINGS)
@_settings_option
@_authorization_option
@_coordinate_options
def cli_certs(
    settings_path: Optional[Path],
    authorization: Optional[str],
    indent: Optional[int],
    project_name: str,
    project_version: str,
    service_name: str,
    service_version: str,
    environment: str,
) -> None:
    """Print merged certificates (base64 by file name) as JSON."""

    _run_fetch(
        Category.CERTS,
        settings_path,
        authorization,
        indent,
        project_name=project_name,
        project_version=project_version,
        service_name=service_name,
        service_version=service_version,
        environment=environment,
    )


@cli.command("files", context_settings=CLICK_CONTEXT_SETTINGS)
@_settings_option
@_authorization_option
@_coordinate_options
def cli_files(
    settings_path: Optional[Path],
    authorization: Optional[str],
    indent: Optional[int],
    project_name: str,
    project_version: str,
    service_name: str,
    service_version: str,
    environment: str,
) -> None:
    """Print merged files (base64 by file name) as JSON."""

    _run_fetch(
        Category.FILES,
        settings_path,
        authorization,
        indent,
        project_name=project_name,
        project_version=project_version,
        service_name=service_name,
        service_version=service_version,
        environment=environment,
    )


@cli.command("search", context_settings=CLICK_CONTEXT_SETTINGS)
@_settings_option
@_authorization_option
@click.option("--project-name", default=None, help="Restrict the listing to one project")
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_search(
    settings_path: Optional[Path],
    authorization: Optional[str],
    project_name: Optional[str],
    indent: Optional[int],
) -> None:
    """List known services as a JSON array of coordinate fragments.

    Only the vault backend can enumerate; other backends print ``[]``.
    """

    with closing(create_provider(load_settings(settings_path))) as provider:
        services = search(provider, authorization, project_name)
    click.echo(json.dumps([service.to_dict() for service in services], indent=indent))


@cli.command("repo-name", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--template", default=None, help="Repository name template with {projectName}/{environment}")
@click.option("--project-name", required=True, help="Project owning the configuration")
@click.option("--environment", required=True, help="Deployment environment")
def cli_repo_name(template: Optional[str], project_name: str, environment: str) -> None:
    """Print the Git repository name used for *project_name* in *environment*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> runner = CliRunner()
    >>> result = runner.invoke(cli, ["repo-name", "--project-name", "retail", "--environment", "dev"])
    >>> result.output.strip()
    'light-service-configs-retail-dev'
    """

    click.echo(git_repository_name(Coordinate(project_name, environment=environment), template))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_server",
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
