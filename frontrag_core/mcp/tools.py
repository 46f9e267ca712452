"""
FrontRAG MCP Tools - Thin wrappers around the tool handlers.

Each MCP tool maps its camelCase arguments onto a handler in
``frontrag_core.tools`` and returns the handler's text. An error envelope
is raised as ``ToolError`` so that MCP reports it in-band (isError) to
the client. Zero business logic in this layer.

Tool groups:
    RETRIEVAL:  get_styling_guide, get_component_template, validate_code_style
    PROJECT:    switch_project, index_guidelines, create_project_collection,
                update_project_guidelines, list_project_collections,
                get_project_info
    REGISTRY:   register_project, add_guideline, list_registered_projects,
                import_guidelines, export_guidelines, migrate_project

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from __future__ import annotations

import logging
from typing import List, Optional

from mcp.server.fastmcp.exceptions import ToolError

from frontrag_core import tools as handlers
from frontrag_core.tools.base import Envelope, ToolContext, envelope_text

logger = logging.getLogger(__name__)


def unwrap(envelope: Envelope) -> str:
    """Envelope -> tool text; error envelopes become ToolError."""
    text = envelope_text(envelope)
    if envelope.get("isError"):
        raise ToolError(text)
    return text


def register_frontend_tools(mcp, ctx: ToolContext) -> None:
    """
    Register all frontend guideline tools on a FastMCP server instance.

    Args:
        mcp: FastMCP server instance.
        ctx: Shared services (engine, detector, registry, config).
    """

    # -- RETRIEVAL ----------------------------------------------------------

    @mcp.tool()
    async def get_styling_guide(
        query: str,
        context: Optional[str] = None,
        projectPath: Optional[str] = None,
    ) -> str:
        """Get styling guidelines for the current project.

        Args:
            query: Search query for styling guidelines.
            context: Component type or context (default: style).
            projectPath: Project path (optional, switches project first).
        """
        return unwrap(await handlers.get_styling_guide(
            ctx, query, context=context, project_path=projectPath,
        ))

    @mcp.tool()
    async def get_component_template(
        componentType: str,
        projectPath: Optional[str] = None,
    ) -> str:
        """Get component template for a specific type (page, modal, form, ...).

        Args:
            componentType: Type of component.
            projectPath: Project path (optional).
        """
        return unwrap(await handlers.get_component_template(
            ctx, componentType, project_path=projectPath,
        ))

    @mcp.tool()
    async def validate_code_style(
        code: str,
        fileType: str,
        projectPath: Optional[str] = None,
    ) -> str:
        """Validate code against project style guidelines.

        Args:
            code: Code to validate.
            fileType: File type (tsx, ts, css, ...).
            projectPath: Project path (optional).
        """
        return unwrap(await handlers.validate_code_style(
            ctx, code, fileType, project_path=projectPath,
        ))

    # -- PROJECT ------------------------------------------------------------

    @mcp.tool()
    async def switch_project(projectPath: str) -> str:
        """Switch to a different project context.

        Args:
            projectPath: Path to the project.
        """
        return unwrap(await handlers.switch_project(ctx, projectPath))

    @mcp.tool()
    async def index_guidelines(projectPath: Optional[str] = None, force: bool = False) -> str:
        """Index or re-index project guidelines.

        Args:
            projectPath: Path to the project (default: server working directory).
            force: Force re-indexing even if already indexed.
        """
        return unwrap(await handlers.index_guidelines(ctx, project_path=projectPath, force=force))

    @mcp.tool()
    async def create_project_collection(
        projectPath: str,
        collectionName: Optional[str] = None,
        force: bool = False,
    ) -> str:
        """Create (and index) the vector collection of a project.

        Args:
            projectPath: Path to the project.
            collectionName: Explicit collection name (optional).
            force: Drop and rebuild an existing collection.
        """
        return unwrap(await handlers.create_project_collection(
            ctx, projectPath, collection_name=collectionName, force=force,
        ))

    @mcp.tool()
    async def update_project_guidelines(
        projectPath: Optional[str] = None,
        files: Optional[List[str]] = None,
    ) -> str:
        """Re-index all guidelines of a project.

        Args:
            projectPath: Path to the project (optional).
            files: Changed files (informational; the whole set is re-indexed).
        """
        return unwrap(await handlers.update_project_guidelines(
            ctx, project_path=projectPath, files=files,
        ))

    @mcp.tool()
    async def list_project_collections() -> str:
        """List all collections in the vector store with their document counts."""
        return unwrap(await handlers.list_project_collections(ctx))

    @mcp.tool()
    async def get_project_info() -> str:
        """Show the current project and its collection."""
        return unwrap(await handlers.get_project_info(ctx))

    # -- REGISTRY -----------------------------------------------------------

    @mcp.tool()
    async def register_project(
        projectPath: str,
        projectId: Optional[str] = None,
        name: Optional[str] = None,
        importGuidelines: bool = False,
    ) -> str:
        """Register a project in the server's project registry.

        Args:
            projectPath: Path to the project.
            projectId: Explicit project id (optional, generated otherwise).
            name: Display name (optional).
            importGuidelines: Copy .mcp-guidelines/*.md into the registry.
        """
        return unwrap(await handlers.register_project(
            ctx, projectPath, project_id=projectId, name=name,
            import_guidelines=importGuidelines,
        ))

    @mcp.tool()
    async def add_guideline(projectId: str, filename: str, content: str) -> str:
        """Add a guideline file to a registered project.

        Args:
            projectId: Registered project id.
            filename: Guideline file name (e.g. buttons.md).
            content: File content.
        """
        return unwrap(await handlers.add_guideline(ctx, projectId, filename, content))

    @mcp.tool()
    async def list_registered_projects() -> str:
        """List all registered projects."""
        return unwrap(await handlers.list_registered_projects(ctx))

    @mcp.tool()
    async def import_guidelines(projectId: str, sourcePath: str) -> str:
        """Import *.md guidelines from a local folder into a registered project.

        Args:
            projectId: Registered project id.
            sourcePath: Folder to import from.
        """
        return unwrap(await handlers.import_guidelines(ctx, projectId, sourcePath))

    @mcp.tool()
    async def export_guidelines(projectId: str, outputPath: str) -> str:
        """Export a registered project's *.md guidelines to a folder.

        Args:
            projectId: Registered project id.
            outputPath: Destination folder.
        """
        return unwrap(await handlers.export_guidelines(ctx, projectId, outputPath))

    @mcp.tool()
    async def migrate_project(
        projectPath: str,
        projectId: Optional[str] = None,
        cleanup: bool = False,
    ) -> str:
        """Register a project and import its local .mcp-guidelines folder.

        Args:
            projectPath: Path to the project.
            projectId: Explicit project id (optional).
            cleanup: List the local files that can be removed afterwards.
        """
        return unwrap(await handlers.migrate_project(
            ctx, projectPath, project_id=projectId, cleanup=cleanup,
        ))

    logger.info("Registered 15 frontend guideline tools")
