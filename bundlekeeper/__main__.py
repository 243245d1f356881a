"""
Executable module for bundlekeeper.

Running:
    python -m bundlekeeper

is equivalent to:
    bundlekeeper

This module forwards execution to the CLI entrypoint defined in
`bundlekeeper.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("bundlekeeper CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from bundlekeeper.__version__ import __version__

        sys.stderr.write(f"bundlekeeper version: {__version__}\n")
    except ImportError:
        sys.stderr.write("bundlekeeper version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """Main entrypoint when executing `python -m bundlekeeper`.

    Returns:
        Exit code returned by the CLI, or 1 if it cannot be imported.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from bundlekeeper.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
