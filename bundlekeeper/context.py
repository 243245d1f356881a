"""
Shared context object for bundlekeeper CLI commands.

This module defines the global Click context used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from bundlekeeper.config import BundleKeeperConfig


class BundleKeeperContext:
    """Global context object for bundlekeeper CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Path to the bundlekeeper configuration file, if any.
        config: Loaded configuration (defaults when no file was found).
        verbose: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3+=TRACE).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: BundleKeeperConfig = BundleKeeperConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`BundleKeeperContext` into commands.
pass_context = click.make_pass_decorator(BundleKeeperContext, ensure=True)
