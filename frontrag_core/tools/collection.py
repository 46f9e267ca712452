"""
FrontRAG Tools - Project and collection management

switch_project, index_guidelines, create_project_collection,
update_project_guidelines, list_project_collections, get_project_info.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
from typing import List, Optional

from .base import (
    Envelope,
    ToolContext,
    require,
    resolve_project,
    text_response,
    tool_handler,
)

logger = logging.getLogger(__name__)


@tool_handler("Error switching project")
async def switch_project(ctx: ToolContext, project_path: str) -> Envelope:
    require(project_path, "projectPath is required")
    project = ctx.detector.load_project(project_path)
    await ctx.engine.load_project(project)
    return text_response(f"Switched to project: {project.name}")


@tool_handler("Error indexing guidelines")
async def index_guidelines(
    ctx: ToolContext,
    project_path: Optional[str] = None,
    force: bool = False,
) -> Envelope:
    project = resolve_project(ctx, project_path)
    result = await ctx.engine.index_guidelines(project, force=force)
    return text_response(
        f"Indexed {result.documents_indexed} documents for project: {project.name}"
    )


@tool_handler("❌ Error creating collection")
async def create_project_collection(
    ctx: ToolContext,
    project_path: str,
    collection_name: Optional[str] = None,
    force: bool = False,
) -> Envelope:
    require(project_path, "projectPath is required")
    project = ctx.detector.load_project(project_path)
    if collection_name:
        # The cached config keeps the name, later switches reuse it
        project.vector_db_collection = collection_name

    result = await ctx.engine.index_guidelines(project, force=force)
    return text_response(
        "✅ Collection created successfully!\n\n"
        f"**Collection Name**: {result.collection_name}\n"
        f"**Project**: {project.name}\n"
        f"**Documents Indexed**: {result.documents_indexed}\n"
        f"**Force Reindex**: {str(force).lower()}\n\n"
        "The collection is now ready to use. Switch to this project to start querying."
    )


@tool_handler("❌ Error updating guidelines")
async def update_project_guidelines(
    ctx: ToolContext,
    project_path: Optional[str] = None,
    files: Optional[List[str]] = None,
) -> Envelope:
    project = resolve_project(ctx, project_path)
    if files:
        logger.info(f"Selective update requested for {len(files)} files; re-indexing all guidelines")

    result = await ctx.engine.index_guidelines(project, force=True)
    return text_response(
        "✅ Guidelines updated successfully!\n\n"
        f"**Project**: {project.name}\n"
        f"**Collection**: {result.collection_name}\n"
        f"**Documents Re-indexed**: {result.documents_indexed}\n\n"
        "All guidelines have been refreshed and are ready to use."
    )


@tool_handler("❌ Error listing collections")
async def list_project_collections(ctx: ToolContext) -> Envelope:
    collections = await ctx.engine.list_all_collections()
    if not collections:
        return text_response(
            "📋 No collections found. Create a collection using `create_project_collection` tool."
        )

    listing = "\n".join(
        f"{i}. **{col['name']}** ({col['count']} documents)"
        for i, col in enumerate(collections, 1)
    )
    return text_response(
        f"📋 Available Collections:\n\n{listing}\n\n"
        "Use `switch_project` to activate a specific collection."
    )


@tool_handler("❌ Error getting project info")
async def get_project_info(ctx: ToolContext) -> Envelope:
    project = ctx.engine.get_current_project()
    if project is None:
        return text_response("⚠️ No project currently loaded. Use `switch_project` to load a project.")

    info = await ctx.engine.get_collection_info()
    overrides = project.overrides.model_dump(by_alias=True, exclude_none=True) if project.overrides else {}
    override_lines = "\n".join(f"  - {key}: {value}" for key, value in overrides.items()) or "  None"
    guidelines_path = project.guidelines.path if project.guidelines else "Not specified"

    return text_response(
        "📊 Current Project Information\n\n"
        f"**Project Name**: {project.name}\n"
        f"**Project ID**: {project.id}\n"
        f"**Version**: {project.version or 'N/A'}\n"
        f"**Collection**: {info['name']}\n"
        f"**Documents**: {info['count']}\n"
        f"**Priority**: {project.priority}\n\n"
        f"**Overrides**:\n{override_lines}\n\n"
        f"**Guidelines Path**: {guidelines_path}"
    )
