"""
FrontRAG MCP Server - Frontend guidelines for MCP clients

Standalone MCP server (stdio transport) exposing project-scoped styling
guidelines, component templates and style validation backed by ChromaDB.

Startup connects to ChromaDB before any tool call is served; an
unreachable store aborts the server.

Usage:
    python -m frontrag_core.mcp
    frontrag-mcp --config frontrag.yaml -v

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple

logger = logging.getLogger(__name__)

_MCP_INSTRUCTIONS = (
    "Frontend development guidelines, scoped per project.\n"
    "\n"
    "STYLE:     get_styling_guide for conventions, validate_code_style to check code.\n"
    "TEMPLATE:  get_component_template for page/modal/form/component skeletons.\n"
    "PROJECT:   switch_project before querying a specific codebase;\n"
    "           index_guidelines after guideline files change (force=true).\n"
    "REGISTRY:  register_project / add_guideline to manage server-side guidelines.\n"
)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser for the MCP server."""
    p = argparse.ArgumentParser(
        prog="frontrag-mcp",
        description="FrontRAG MCP Server: frontend guidelines for MCP clients",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to frontrag.yaml (default: search cwd, then ~/.config/frontrag)",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return p


async def startup(ctx) -> None:
    """Connect the engine and optionally load the project found from cwd."""
    logger.info("Initializing MCP Frontend RAG Server...")
    await ctx.engine.initialize()

    if ctx.config.server.auto_detect:
        project = ctx.detector.detect_current_project()
        if project is not None:
            logger.info(f"Auto-detected project: {project.name}")
            await ctx.engine.load_project(project)

    logger.info("Server initialization complete")


def create_server(config=None, ctx=None) -> Tuple["FastMCP", "ToolContext"]:
    """
    Create and configure the FastMCP server with frontend tools.

    Args:
        config: FrontRAGConfig (loaded from disk/env if None).
        ctx: Pre-built ToolContext (built from config if None).

    Returns:
        (mcp_server, ctx) tuple.
    """
    from mcp.server.fastmcp import FastMCP

    from frontrag_core.config import load_config
    from frontrag_core.mcp.tools import register_frontend_tools
    from frontrag_core.tools.base import ToolContext
    from frontrag_core.version import get_version

    if config is None:
        config = ctx.config if ctx is not None else load_config()
    if ctx is None:
        ctx = ToolContext.from_config(config)

    @asynccontextmanager
    async def lifespan(server) -> AsyncIterator[ToolContext]:
        await startup(ctx)
        yield ctx

    mcp = FastMCP(
        name=config.server.name,
        instructions=_MCP_INSTRUCTIONS,
        lifespan=lifespan,
    )
    register_frontend_tools(mcp, ctx)

    logger.info(
        f"FrontRAG MCP server v{get_version()} ready: chroma={config.chroma.host}:{config.chroma.port}, "
        f"embeddings={config.embedding.backend}/{config.embedding.model}, "
        f"auto_detect={config.server.auto_detect}"
    )
    return mcp, ctx


def main(argv: Optional[list] = None):
    """CLI entry point: parse args, configure logging, create server, run."""
    from frontrag_core.config import load_config
    from frontrag_core.logging_utils import setup_logging

    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.logging, verbose=args.verbose)

    mcp, _ctx = create_server(config)
    mcp.run()


if __name__ == "__main__":
    main()
