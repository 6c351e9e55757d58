"""
Command line entry point.

Generate a citation graph based on the contents of a bibliography
and/or explicit identifiers, and print it as Graphviz DOT.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import Settings
from .core import CitationGraphService, DataSourceError, load_bibliography

logger = logging.getLogger("citation-graph")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="citation-graph",
        description="Generate a citation graph based on the contents of a bibliography.",
    )
    parser.add_argument(
        "bibliography",
        nargs="?",
        help="the path to a Bib(La)TeX bibliography",
    )
    parser.add_argument(
        "--id",
        dest="ids",
        action="append",
        default=[],
        metavar="ID",
        help="a seed DOI, Semantic Scholar URL or id (repeatable)",
    )
    parser.add_argument(
        "--base-url",
        default=settings.S2_BASE_URL,
        help="what URL will be serving the API (default: %(default)s)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=settings.MAX_DEPTH,
        help="how many search iterations should be performed (default: %(default)s)",
    )
    parser.add_argument(
        "--connectivity",
        type=float,
        default=settings.CONNECTIVITY,
        help=(
            "the citation density of your bibliography's reference network; "
            "try to tune this so only some dozens of papers are searched in "
            "the last iteration (default: %(default)s)"
        ),
    )
    parser.add_argument(
        "--prune-passes",
        type=int,
        default=settings.PRUNE_PASSES,
        help="pruning passes over the finished graph (default: %(default)s)",
    )
    parser.add_argument(
        "--prune-to-fixed-point",
        action="store_true",
        default=settings.PRUNE_TO_FIXED_POINT,
        help="prune until nothing changes instead of a fixed number of passes",
    )
    parser.add_argument(
        "--commit-expanded-papers",
        action="store_true",
        default=settings.COMMIT_EXPANDED_PAPERS,
        help="also add every expanded paper as a node",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="write the DOT file here instead of stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress to stderr (-vv for debug output)",
    )
    return parser


async def _run(args: argparse.Namespace, settings: Settings) -> str:
    raw_ids = list(args.ids)
    if args.bibliography:
        raw_ids.extend(load_bibliography(args.bibliography).ids)

    service = CitationGraphService(
        settings=settings.model_copy(update={"S2_BASE_URL": args.base_url})
    )
    try:
        graph, stats = await service.build_graph(
            raw_ids,
            max_depth=args.max_depth,
            connectivity=args.connectivity,
            prune_passes=args.prune_passes,
            prune_to_fixed_point=args.prune_to_fixed_point,
            commit_expanded_papers=args.commit_expanded_papers,
        )
    finally:
        await service.close()

    logger.info(
        f"Graph has {stats.nodes} nodes and {stats.edges} edges "
        f"after {stats.prune_passes} pruning passes"
    )
    return service.render(graph)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    settings = Settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if not args.bibliography and not args.ids:
        parser.error("give a bibliography or at least one --id")

    if args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        dot = asyncio.run(_run(args, settings))
    except ValueError as e:
        parser.error(str(e))
    except OSError as e:
        logger.error(f"Cannot read bibliography: {e}")
        return 2
    except DataSourceError as e:
        logger.error(f"Crawl aborted: {e}")
        return 1

    if args.output:
        args.output.write_text(dot, encoding="utf-8")
    else:
        sys.stdout.write(dot)
    return 0
