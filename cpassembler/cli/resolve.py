"""Resolve command implementation."""

from __future__ import annotations

import logging
from typing import List

from rich.console import Console
from rich.table import Table

from cpassembler.model.descriptors import Descriptor
from cpassembler.model.scope import parse_scopes
from cpassembler.resolution.assembler import DependencyManager, classpath_string
from cpassembler.resolution.client import MavenResolver
from cpassembler.resolution.errors import CpAssemblerError
from cpassembler.runtime.workspace import load_workspace

logger = logging.getLogger("cpassembler.cli.resolve")


def _render_table(project_name: str, classpath: List[Descriptor], console: Console) -> None:
    table = Table(title=f"Classpath of {project_name} ({len(classpath)} entries)")
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Id", style="magenta")
    table.add_column("Kind", style="green")
    table.add_column("File")

    for index, descriptor in enumerate(classpath, start=1):
        table.add_row(
            str(index),
            descriptor.id,
            "maven" if descriptor.is_maven else "file",
            str(descriptor.jar_file()),
        )
    console.print(table)


def resolve_command(args) -> int:
    """Execute resolve command.

    Args:
        args: Parsed command-line arguments containing:
            - workspace: Workspace file (TOML/JSON)
            - project: Name of the project to resolve
            - test: Assemble the test classpath
            - scope: Optional scope override (repeatable)
            - format: Output format (path, list, table)

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        context = load_workspace(args.workspace)
        project = context.project(args.project)
        scopes = parse_scopes(getattr(args, "scope", None))
        is_test = bool(getattr(args, "test", False))

        manager = DependencyManager(MavenResolver(context.config))
        classpath = manager.resolve(project, context, is_test, scopes)

        output_format = getattr(args, "format", "path") or "path"
        if output_format == "table":
            _render_table(project.name, classpath, Console())
        elif output_format == "list":
            for descriptor in classpath:
                print(descriptor.jar_file())
        else:
            print(classpath_string(classpath))
        return 0

    except CpAssemblerError as exc:
        logger.error("%s", exc)
        return 1
    except (ValueError, OSError) as exc:
        logger.error("Cannot load workspace %s: %s", args.workspace, exc)
        return 1


__all__ = ["resolve_command"]
