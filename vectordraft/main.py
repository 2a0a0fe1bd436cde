#!/usr/bin/env python3
"""
VectorDraft - Command Line Entry Point

Inspects and exports saved VectorDraft projects.
Run with: python -m vectordraft.main
"""

import argparse
import logging
import sys

from .io.project_io import load_project
from .io.svg_export import export_svg

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vectordraft",
                                     description="VectorDraft project tools")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="list pages and shape counts")
    info.add_argument("project", help="project file (.json)")

    export = subparsers.add_parser("export-svg", help="export a page as SVG")
    export.add_argument("project", help="project file (.json)")
    export.add_argument("output", help="SVG file to write")
    export.add_argument("--page", help="page id (defaults to the active page)")
    return parser


def _info(store) -> int:
    counts = store.layer_counts()
    for page in store.pages:
        marker = "*" if page.id == store.active_page_id else " "
        print(f"{marker} {page.name} ({page.id}): {counts.get(page.id, 0)} shapes")
    return 0


def _export(store, output: str, page_id) -> int:
    if page_id is not None and store.get_page(page_id) is None:
        print(f"Unknown page: {page_id}", file=sys.stderr)
        return 1
    return 0 if export_svg(store, output, page_id) else 1


def main(argv=None) -> int:
    """Main entry point for the vectordraft command."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    store = load_project(args.project)
    if store is None:
        print(f"Could not load project: {args.project}", file=sys.stderr)
        return 1

    if args.command == "info":
        return _info(store)
    return _export(store, args.output, args.page)


if __name__ == "__main__":
    sys.exit(main())
