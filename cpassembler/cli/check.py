"""CLI command to validate the project graph of a workspace.

Every project reference and every dependency id is checked, and dependency
cycles between projects are reported. The exit status is non-zero when any
problem is found, so the command can gate CI pipelines.
"""

from __future__ import annotations

import logging
from typing import Optional

from cpassembler.resolution.errors import ConfigurationError, DependencyCycleError
from cpassembler.runtime.workspace import load_workspace, project_descriptors

logger = logging.getLogger("cpassembler.cli.check")


def check_command(args) -> int:
    """Execute workspace validation command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code (0 for a valid workspace, 1 otherwise).
    """
    try:
        context = load_workspace(args.workspace)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    except (ValueError, OSError) as exc:
        logger.error("Cannot load workspace %s: %s", args.workspace, exc)
        return 1

    limit_arg = getattr(args, "limit", None)
    # <= 0 means no limit.
    limit: Optional[int] = limit_arg if isinstance(limit_arg, int) and limit_arg > 0 else None

    graph = context.project_graph
    for project in graph:
        logger.info(
            "Project %s: %d declared dependencies, depends on [%s]",
            project.name,
            len(project_descriptors(project)),
            ", ".join(project.depends_on),
        )

    problems = graph.validate(limit=limit)
    if not problems:
        logger.info("Workspace has %d project(s) and no problems", len(graph))
        print(f"OK: {len(graph)} project(s), no missing references, no cycles")
        return 0

    cycles = sum(1 for p in problems if isinstance(p, DependencyCycleError))
    logger.warning(
        "Detected %d problem(s) (%d cycle(s))", len(problems), cycles
    )
    for idx, problem in enumerate(problems, start=1):
        logger.error("Problem %d: %s", idx, problem)
    return 1


__all__ = ["check_command"]
