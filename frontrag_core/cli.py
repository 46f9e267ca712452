#!/usr/bin/env python3
"""
FrontRAG Command Line Interface
===============================

Operations around the MCP server: indexing, store diagnostics, paths.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19

Usage:
    frontrag serve                 Start the MCP server (stdio)
    frontrag index-default         Index the shared default guidelines
    frontrag index PATH            Index a project's guidelines
    frontrag check                 Check ChromaDB and a collection
    frontrag paths                 Show data paths
    frontrag version               Show version
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .config import FrontRAGConfig, load_config
from .logging_utils import setup_logging
from .version import get_short_banner, get_version_info

logger = logging.getLogger(__name__)

SAMPLE_QUERY = "CSS Modules styling"

# =============================================================================
# ANSI Colors
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    BOLD = '\033[1m'
    NC = '\033[0m'  # No Color

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.RED = cls.GREEN = cls.YELLOW = cls.BLUE = ''
        cls.CYAN = cls.BOLD = cls.NC = ''


def print_ok(msg: str) -> None:
    print(f"{Colors.GREEN}✓{Colors.NC} {msg}")


def print_warn(msg: str) -> None:
    print(f"{Colors.YELLOW}⚠{Colors.NC} {msg}")


def print_error(msg: str) -> None:
    print(f"{Colors.RED}✗{Colors.NC} {msg}")


def print_info(msg: str) -> None:
    print(f"{Colors.BLUE}ℹ{Colors.NC} {msg}")


def print_header(msg: str) -> None:
    print(f"\n{Colors.BOLD}{Colors.CYAN}{msg}{Colors.NC}")
    print("=" * len(msg))


def print_results(results) -> None:
    for i, result in enumerate(results, 1):
        preview = result.content[:100].replace("\n", " ")
        print(f"\n{i}. {result.title}")
        print(f"   Score: {result.score * 100:.1f}%")
        print(f"   Type: {result.metadata.get('type', 'n/a')}")
        print(f"   Preview: {preview}...")


# =============================================================================
# Commands
# =============================================================================

def _engine(config: FrontRAGConfig):
    from .rag.engine import RAGEngine
    return RAGEngine(config)


async def _index_default(config: FrontRAGConfig, args: argparse.Namespace) -> int:
    engine = _engine(config)
    await engine.initialize()
    print_ok("RAG Engine initialized")

    result = await engine.index_default_guidelines(
        args.dir, force=args.force, sections=args.sections,
    )
    print_ok(f"Indexed {result.documents_indexed} documents into {result.collection_name}")

    results = await engine.search(SAMPLE_QUERY, max_results=3, threshold=0.0)
    if results:
        print_header(f"Sample query: {SAMPLE_QUERY}")
        print_results(results)
    else:
        print_warn("Sample query returned no documents")
    return 0


async def _index_project(config: FrontRAGConfig, args: argparse.Namespace) -> int:
    from .project.detector import ProjectDetector

    engine = _engine(config)
    await engine.initialize()

    project = ProjectDetector().load_project(args.project_path)
    print_info(f"Project: {project.name} ({project.id})")
    print_info(f"Guidelines path: {project.guidelines_dir()}")

    result = await engine.index_guidelines(project, force=args.force)
    print_ok(f"Indexed {result.documents_indexed} documents into {result.collection_name}")

    await engine.load_project(project)
    results = await engine.search(SAMPLE_QUERY, max_results=3, threshold=0.0)
    if results:
        print_header(f"Sample query: {SAMPLE_QUERY}")
        print_results(results)
    return 0


async def _check(config: FrontRAGConfig, args: argparse.Namespace) -> int:
    from .rag.engine import RAGEngineError

    engine = _engine(config)
    try:
        await engine.initialize()
    except RAGEngineError as e:
        print_error(str(e))
        return 1
    print_ok(f"Connected to ChromaDB at {config.chroma.host}:{config.chroma.port}")

    name = args.collection or config.chroma.default_collection
    collections = {c["name"]: c["count"] for c in await engine.list_all_collections()}
    if name not in collections:
        print_warn(f"Collection not found: {name}")
        return 1

    print_ok(f"Collection {name} has {collections[name]} documents")
    if collections[name] == 0:
        return 0

    collection = await engine.client.get_collection(
        name=name,
        embedding_function=engine.embedding_service.get_embedding_function(),
    )
    results = await engine.search_service.search(collection, args.query, max_results=3, threshold=0.0)
    print_header(f"Query: {args.query}")
    print_results(results)
    return 0


def cmd_serve(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    from .mcp.server import create_server

    mcp, _ctx = create_server(config)
    mcp.run()
    return 0


def cmd_index_default(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    print_header("Indexing Default Guidelines")
    return asyncio.run(_index_default(config, args))


def cmd_index(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    print_header("Indexing Project Guidelines")
    return asyncio.run(_index_project(config, args))


def cmd_check(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    print_header("ChromaDB Check")
    return asyncio.run(_check(config, args))


def cmd_paths(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    paths = config.paths.to_dict()
    if args.json:
        print(json.dumps(paths, indent=2))
        return 0

    print_header("FrontRAG Paths")
    for key, value in paths.items():
        exists = Path(value).exists()
        marker = f"{Colors.GREEN}exists{Colors.NC}" if exists else f"{Colors.YELLOW}missing{Colors.NC}"
        print(f"  {key:<24} {value}  [{marker}]")
    return 0


def cmd_version(args: argparse.Namespace, config: FrontRAGConfig) -> int:
    if args.json:
        print(json.dumps(get_version_info(), indent=2))
    else:
        print(get_short_banner())
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frontrag",
        description="FrontRAG - Frontend guidelines retrieval for MCP clients",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  frontrag serve                      Start the MCP server
  frontrag index-default --force      Rebuild the default collection
  frontrag index ./my-app --force     Rebuild a project collection
  frontrag check -q "button spacing"  Query the default collection
        """
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to frontrag.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    sub = subparsers.add_parser("serve", help="Start the MCP server (stdio)")
    sub.set_defaults(func=cmd_serve)

    # index-default
    sub = subparsers.add_parser("index-default", help="Index the default guidelines")
    sub.add_argument("--dir", default=None, help="Guidelines directory (default: from config)")
    sub.add_argument("--sections", action="store_true", help="One document per '## ' section")
    sub.add_argument("--force", action="store_true", help="Drop and rebuild the collection")
    sub.set_defaults(func=cmd_index_default)

    # index
    sub = subparsers.add_parser("index", help="Index a project's guidelines")
    sub.add_argument("project_path", help="Project root directory")
    sub.add_argument("--force", action="store_true", help="Drop and rebuild the collection")
    sub.set_defaults(func=cmd_index)

    # check
    sub = subparsers.add_parser("check", help="Check ChromaDB and a collection")
    sub.add_argument("-c", "--collection", default=None, help="Collection name (default: default collection)")
    sub.add_argument("-q", "--query", default=SAMPLE_QUERY, help="Sample query text")
    sub.set_defaults(func=cmd_check)

    # paths
    sub = subparsers.add_parser("paths", help="Show data paths")
    sub.add_argument("--json", action="store_true", help="JSON output")
    sub.set_defaults(func=cmd_paths)

    # version
    sub = subparsers.add_parser("version", help="Show version")
    sub.add_argument("--json", action="store_true", help="JSON output")
    sub.set_defaults(func=cmd_version)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    if not sys.stdout.isatty():
        Colors.disable()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        return 2
    setup_logging(config.logging, verbose=args.verbose)

    try:
        return args.func(args, config)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=args.verbose)
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
