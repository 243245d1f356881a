"""Resolve and clean commands for bundlekeeper.

``resolve`` walks the dependency graph of every workspace project and
rewrites the dependencies document; ``clean`` resets the document to empty
entries.

Both commands build the workspace from configuration:

1. **load_workspace** reads the project manifests and scans
   ``bundle_paths`` for external bundles.
2. **DependencyCollector** walks each project's references through one
   shared :class:`ResolutionCache`, so each reference is resolved once per
   invocation.
3. **DependenciesDocument** persists the result.

Typical usage::

    $ bundlekeeper resolve
    $ bundlekeeper -vv resolve      # debug logging
    $ bundlekeeper clean
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import click

from bundlekeeper.models import Project
from bundlekeeper.config import BundleKeeperConfig
from bundlekeeper.context import pass_context, BundleKeeperContext
from bundlekeeper.exceptions import BundleKeeperError, UnsupportedConfigurationError
from bundlekeeper.core import (
    CollectionResult,
    DependenciesDocument,
    ManifestParser,
    clean_dependencies,
    load_workspace,
    new_collector,
    resolve_dependencies,
)
from bundlekeeper.utils import (
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.resolve")


@click.command()
@pass_context
def resolve(ctx: BundleKeeperContext) -> None:
    """Resolve workspace dependencies into the dependencies document.

    Every project (sub-projects first, then the workspace root) is
    collected transitively. Its entry lists the external bundle
    coordinates and the workspace projects it depends on, both sorted.
    A project never appears in its own entry.

    Exits:
        0 on success, 1 if the workspace cannot be loaded or the document
        cannot be written.
    """
    try:
        _resolve(ctx.config)
        sys.exit(0)

    except BundleKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in resolve command")
        sys.exit(1)


@click.command()
@pass_context
def clean(ctx: BundleKeeperContext) -> None:
    """Reset the dependencies document to empty entries."""
    try:
        config = ctx.config
        workspace = load_workspace(config)
        document = DependenciesDocument(config.base_dir, config.dependencies_file)
        clean_dependencies(workspace, document)
        print_success(f"Cleaned {document.path}")
        sys.exit(0)

    except BundleKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in clean command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def _resolve(config: BundleKeeperConfig) -> Dict[str, CollectionResult]:
    workspace = load_workspace(config)
    document = DependenciesDocument(config.base_dir, config.dependencies_file)

    results = resolve_dependencies(workspace, new_collector(workspace), document)

    parser = ManifestParser(config.group)
    rows = [
        _create_table_row(
            project,
            results[project.name],
            _execution_environments(parser, project, config),
        )
        for project in workspace.all_projects()
    ]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Project": {"style": "bold cyan", "no_wrap": True},
        "Bundles": {"justify": "right"},
        "Projects": {"justify": "right"},
        "Execution Environments": {"style": "dim"},
    }
    print_table(rows, title="Resolved Dependencies", column_styles=column_styles)
    print_success(f"Wrote {document.path}")
    return results


def _execution_environments(
    parser: ManifestParser,
    project: Project,
    config: BundleKeeperConfig,
) -> Optional[List[Optional[str]]]:
    """Execution environment locations of ``project``; ``None`` when unsupported."""
    try:
        return parser.execution_environments(project, config.execution_environments)
    except UnsupportedConfigurationError as e:
        print_warning(f"{project.name}: {e}")
        return None


def _create_table_row(
    project: Project,
    result: CollectionResult,
    environments: Optional[List[Optional[str]]],
) -> Dict[str, str]:
    if environments is None:
        ee_display = "[red]unsupported[/red]"
    elif environments:
        ee_display = ", ".join(location or "?" for location in environments)
    else:
        ee_display = "-"

    return {
        "Project": project.name,
        "Bundles": str(len(result.bundles)),
        "Projects": str(len(result.projects)),
        "Execution Environments": ee_display,
    }
