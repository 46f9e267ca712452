"""
FrontRAG Tools - Project registry management

register_project, add_guideline, list_registered_projects,
import_guidelines, export_guidelines, migrate_project.

Guideline transfer copies top-level ``*.md`` files only. Migration never
deletes anything: with ``cleanup`` it only lists what may be removed.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..project.config import PROJECT_CONFIG_FILE
from ..project.registry import RegistryEntry
from .base import Envelope, ToolContext, require, text_response, tool_handler

logger = logging.getLogger(__name__)

LOCAL_GUIDELINES_DIR = ".mcp-guidelines"


def copy_markdown_files(source_dir: Union[str, Path], dest_dir: Union[str, Path]) -> int:
    """Copy ``*.md`` files from source_dir to dest_dir; returns the count."""
    source_dir, dest_dir = Path(source_dir), Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for path in sorted(source_dir.iterdir()):
        if path.is_file() and path.suffix == ".md":
            shutil.copyfile(path, dest_dir / path.name)
            count += 1
    return count


def _lookup(ctx: ToolContext, project_id: str) -> RegistryEntry:
    entry = ctx.registry.get_project_by_id(project_id)
    if entry is None:
        raise LookupError(f"Project not found: {project_id}")
    return entry


def _format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


@tool_handler("❌ Error registering project")
async def register_project(
    ctx: ToolContext,
    project_path: str,
    project_id: Optional[str] = None,
    name: Optional[str] = None,
    import_guidelines: bool = False,
) -> Envelope:
    require(project_path, "projectPath is required")
    entry = ctx.registry.register_project(project_path, project_id=project_id, name=name)

    imported_note = ""
    if import_guidelines:
        local = Path(project_path) / LOCAL_GUIDELINES_DIR
        if local.is_dir():
            count = copy_markdown_files(local, entry.guidelines_path)
            logger.info(f"Imported {count} guidelines from {local}")
        imported_note = "Imported guidelines from .mcp-guidelines folder.\n\n"

    return text_response(
        "✅ Project registered successfully!\n\n"
        f"**Project ID**: {entry.id}\n"
        f"**Name**: {entry.name}\n"
        f"**Path**: {entry.project_path}\n"
        f"**Collection**: {entry.collection_name}\n"
        f"**Guidelines Path**: {entry.guidelines_path}\n\n"
        f"{imported_note}"
        "Use `add_guideline` to add guidelines, or `import_guidelines` to import from a folder."
    )


@tool_handler("❌ Error adding guideline")
async def add_guideline(ctx: ToolContext, project_id: str, filename: str, content: str) -> Envelope:
    require(project_id and filename and content, "projectId, filename, and content are required")
    entry = _lookup(ctx, project_id)

    guidelines_dir = Path(entry.guidelines_path)
    file_path = (guidelines_dir / filename).resolve()
    if guidelines_dir.resolve() not in file_path.parents:
        raise ValueError(f"Invalid guideline filename: {filename}")

    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    logger.info(f"Added guideline: {filename} to project {project_id}")

    return text_response(
        "✅ Guideline added successfully!\n\n"
        f"**Project**: {entry.name}\n"
        f"**File**: {filename}\n"
        f"**Path**: {file_path}\n\n"
        "Use `update_project_guidelines` to re-index if needed."
    )


@tool_handler("❌ Error listing projects")
async def list_registered_projects(ctx: ToolContext) -> Envelope:
    projects = ctx.registry.list_projects()
    if not projects:
        return text_response("📋 No projects registered yet. Use `register_project` to add a project.")

    listing = "\n\n".join(
        f"{i}. **{p.name}** ({p.id})\n"
        f"   Path: {p.project_path}\n"
        f"   Collection: {p.collection_name}\n"
        f"   Last accessed: {_format_timestamp(p.last_accessed)}"
        for i, p in enumerate(projects, 1)
    )
    return text_response(f"📋 Registered Projects:\n\n{listing}")


@tool_handler("❌ Error importing guidelines")
async def import_guidelines(ctx: ToolContext, project_id: str, source_path: str) -> Envelope:
    require(project_id and source_path, "projectId and sourcePath are required")
    entry = _lookup(ctx, project_id)
    if not Path(source_path).is_dir():
        raise FileNotFoundError(f"Source path does not exist: {source_path}")

    count = copy_markdown_files(source_path, entry.guidelines_path)
    return text_response(
        "✅ Guidelines imported successfully!\n\n"
        f"**Project**: {entry.name}\n"
        f"**Imported**: {count} files\n"
        f"**From**: {source_path}\n"
        f"**To**: {entry.guidelines_path}\n\n"
        "Use `update_project_guidelines` to re-index."
    )


@tool_handler("❌ Error exporting guidelines")
async def export_guidelines(ctx: ToolContext, project_id: str, output_path: str) -> Envelope:
    require(project_id and output_path, "projectId and outputPath are required")
    entry = _lookup(ctx, project_id)

    count = copy_markdown_files(entry.guidelines_path, output_path)
    return text_response(
        "✅ Guidelines exported successfully!\n\n"
        f"**Project**: {entry.name}\n"
        f"**Exported**: {count} files\n"
        f"**To**: {output_path}"
    )


@tool_handler("❌ Error migrating project")
async def migrate_project(
    ctx: ToolContext,
    project_path: str,
    project_id: Optional[str] = None,
    name: Optional[str] = None,
    cleanup: bool = False,
) -> Envelope:
    require(project_path, "projectPath is required")
    entry = ctx.registry.register_project(project_path, project_id=project_id, name=name)

    local = Path(project_path) / LOCAL_GUIDELINES_DIR
    count = copy_markdown_files(local, entry.guidelines_path) if local.is_dir() else 0

    cleanup_note = ""
    if cleanup and count > 0:
        cleanup_note = (
            "\n\n⚠️ To cleanup the project folder, manually delete:\n"
            f"- {local}\n"
            f"- {Path(project_path) / PROJECT_CONFIG_FILE}"
        )

    return text_response(
        "✅ Project migrated successfully!\n\n"
        f"**Project ID**: {entry.id}\n"
        f"**Name**: {entry.name}\n"
        f"**Guidelines Imported**: {count} files\n"
        f"**New Guidelines Path**: {entry.guidelines_path}{cleanup_note}"
    )
