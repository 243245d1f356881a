"""Install, upload and install-bundles commands for bundlekeeper.

``install`` and ``upload`` publish the external bundles reached by the
workspace: the sorted, de-duplicated union of every project's collected
bundle set, fragments included. Exploded bundles are repacked into a
temporary jar first. A bundle that fails is reported and skipped; the
rest of the batch still runs.

``install-bundles`` copies the workspace's own packaged bundles to the
release directory.

Typical usage::

    $ bundlekeeper install
    $ bundlekeeper install -o temp_dir=/tmp/repack
    $ bundlekeeper upload --username deployer
    $ bundlekeeper install-bundles --release-to dist
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from bundlekeeper.config import BundleKeeperConfig
from bundlekeeper.context import pass_context, BundleKeeperContext
from bundlekeeper.exceptions import BundleKeeperError, ConfigError
from bundlekeeper.core import (
    InstallationPipeline,
    InstallMode,
    InstallReport,
    LocalRepository,
    RemoteRepository,
    collect_install_set,
    install_bundles as deploy_bundles,
    load_workspace,
    new_collector,
)
from bundlekeeper.utils import (
    HTTPClient,
    colorize_status,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.install")


def _parse_options(
    ctx: click.Context,
    param: click.Parameter,
    values: Tuple[str, ...],
) -> Dict[str, str]:
    """Turn repeated ``-o key=value`` flags into a dictionary."""
    options: Dict[str, str] = {}
    for value in values:
        key, sep, item = value.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {value!r}", ctx=ctx, param=param)
        options[key.strip()] = item.strip()
    return options


pipeline_options = click.option(
    "--option",
    "-o",
    "options",
    multiple=True,
    callback=_parse_options,
    metavar="KEY=VALUE",
    help="Pipeline option (temp_dir, nested_pattern). Can be repeated.",
)


@click.command()
@pipeline_options
@click.option(
    "--repository",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Local repository root (default: local_repository from config).",
)
@pass_context
def install(
    ctx: BundleKeeperContext,
    options: Dict[str, str],
    repository: Optional[Path],
) -> None:
    """Install the workspace's external bundles into a local repository.

    Each bundle replaces any previously installed artifact with the same
    coordinate.

    Exits:
        0 if every bundle was installed, 1 if any bundle failed or an
        error occurred.
    """
    try:
        local = LocalRepository(repository or ctx.config.local_repository)
        pipeline = InstallationPipeline(
            InstallMode.INSTALL,
            local=local,
            nested_pattern=ctx.config.nested_archive_pattern,
        )
        report = _publish(ctx.config, pipeline, options)
        sys.exit(0 if report.succeeded else 1)

    except BundleKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in install command")
        sys.exit(1)


@click.command()
@pipeline_options
@click.option(
    "--url",
    default=None,
    help="Remote repository URL (default: remote_repository from config).",
)
@click.option(
    "--username",
    envvar="BUNDLEKEEPER_USERNAME",
    default=None,
    help="User for basic authentication.",
)
@click.option(
    "--password",
    envvar="BUNDLEKEEPER_PASSWORD",
    default=None,
    help="Password for basic authentication.",
)
@pass_context
def upload(
    ctx: BundleKeeperContext,
    options: Dict[str, str],
    url: Optional[str],
    username: Optional[str],
    password: Optional[str],
) -> None:
    """Upload the workspace's external bundles to a remote repository.

    Exits:
        0 if every bundle was uploaded, 1 if any bundle failed, no
        repository URL is configured, or an error occurred.
    """
    try:
        target = url or ctx.config.remote_repository
        if not target:
            raise ConfigError(
                "No remote repository configured; set remote_repository or pass --url",
                config_path=str(ctx.config_path) if ctx.config_path else None,
                option="remote_repository",
            )

        with HTTPClient() as http:
            remote = RemoteRepository(target, http, username=username, password=password)
            pipeline = InstallationPipeline(
                InstallMode.UPLOAD,
                remote=remote,
                nested_pattern=ctx.config.nested_archive_pattern,
            )
            report = _publish(ctx.config, pipeline, options)

        sys.exit(0 if report.succeeded else 1)

    except BundleKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in upload command")
        sys.exit(1)


@click.command("install-bundles")
@click.option(
    "--release-to",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Release directory (default: release_to from config).",
)
@pass_context
def install_bundles(ctx: BundleKeeperContext, release_to: Optional[Path]) -> None:
    """Copy the workspace projects' bundles to ``<release_to>/plugins``."""
    try:
        workspace = load_workspace(ctx.config)
        deployed = deploy_bundles(workspace, release_to or ctx.config.release_to)

        if not deployed:
            print_warning("No project bundles to deploy")
        else:
            print_success(f"Deployed {len(deployed)} bundle(s)")
        sys.exit(0)

    except BundleKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in install-bundles command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def _publish(
    config: BundleKeeperConfig,
    pipeline: InstallationPipeline,
    options: Dict[str, str],
) -> InstallReport:
    """Collect the install set and run ``pipeline`` over it."""
    if options:
        pipeline.set_options(**options)

    workspace = load_workspace(config)
    bundles = collect_install_set(workspace, new_collector(workspace))

    if not bundles:
        print_warning("No external bundles to publish")
        return InstallReport(pipeline.mode)

    logger.info("Publishing %d bundle(s)", len(bundles))
    report = pipeline.run(bundles)
    _display_report(report)
    return report


def _display_report(report: InstallReport) -> None:
    rows = [{**row, "Status": colorize_status(row["Status"])} for row in report.rows()]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Bundle": {"style": "bold cyan", "no_wrap": True},
        "Status": {"justify": "center"},
        "Detail": {"style": "dim"},
    }
    print_table(rows, title="Installation Report", column_styles=column_styles)

    if report.succeeded:
        print_success(f"{len(report.published)} bundle(s) published")
    else:
        print_error(
            f"{len(report.failures)} bundle(s) failed, {len(report.published)} published"
        )
