"""
The ``bundlekeeper`` command.

Global options select the workspace configuration, log verbosity and
colour; the sub-commands live in :mod:`bundlekeeper.commands`.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from bundlekeeper.config import load_config
from bundlekeeper.__version__ import __version__
from bundlekeeper.context import BundleKeeperContext
from bundlekeeper.exceptions import BundleKeeperError, ConfigError
from bundlekeeper.utils.logger import get_logger, level_for_verbosity, setup_logging
from bundlekeeper.utils.console import print_error, print_warning

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="BUNDLEKEEPER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv, -vvv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="BUNDLEKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="bundlekeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Transitive OSGi bundle resolution for multi-project workspaces.

    \b
    Available commands:
      bundlekeeper resolve           Rewrite the dependencies document
      bundlekeeper clean             Empty the dependencies document
      bundlekeeper install           Install external bundles locally
      bundlekeeper upload            Upload external bundles to a repository
      bundlekeeper install-bundles   Copy workspace bundles to the release dir

    \b
    Examples:
      bundlekeeper resolve
      bundlekeeper -v install
      bundlekeeper upload -o temp_dir=/tmp/repack

    Use ``bundlekeeper COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    bundlekeeper_ctx = BundleKeeperContext()
    bundlekeeper_ctx.config_path = config or loaded_config.source_path
    bundlekeeper_ctx.color = color
    bundlekeeper_ctx.verbose = verbose
    bundlekeeper_ctx.config = loaded_config
    ctx.obj = bundlekeeper_ctx

    # NO_COLOR is read by the console helpers
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"

    logger.debug(
        "Workspace %s at %s (config: %s)",
        loaded_config.workspace_name,
        loaded_config.base_dir,
        bundlekeeper_ctx.config_path or "<defaults>",
    )


def _configure_logging(verbose: int) -> None:
    """-v logs INFO, -vv DEBUG, -vvv TRACE."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level)
    logger.debug("Log level %s", logging.getLevelName(level))


# Register CLI subcommands
try:
    from bundlekeeper.commands.resolve import clean, resolve
    from bundlekeeper.commands.install import install, install_bundles, upload

    cli.add_command(resolve)
    cli.add_command(clean)
    cli.add_command(install)
    cli.add_command(upload)
    cli.add_command(install_bundles)

except ImportError as exc:
    sys.stderr.write(f"bundlekeeper: cannot load sub-commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Run the CLI and map the outcome to an exit status.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error, or failed bundles
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except BundleKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "BundleKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
