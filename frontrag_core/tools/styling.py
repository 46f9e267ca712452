"""
FrontRAG Tools - Styling guide lookup

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
from typing import List, Optional

from ..project.config import ProjectConfig
from ..rag.search import SearchResult
from .base import Envelope, ToolContext, activate_project, text_response, tool_handler

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "No styling guidelines found for your query. "
    "Try being more specific or check if guidelines are indexed."
)


def format_guidelines(results: List[SearchResult], project: Optional[ProjectConfig]) -> str:
    """Numbered guideline list tagged with its source, plus project overrides."""
    project_name = project.name if project else None
    blocks = []
    for i, result in enumerate(results, 1):
        source = f"[Project: {project_name}]" if result.source == "project" else "[Default]"
        blocks.append(f"{i}. {source} {result.title}\n\n{result.content}\n\n---")

    text = "## Styling Guidelines\n\n" + "\n\n".join(blocks)

    overrides = project.overrides.model_dump(by_alias=True, exclude_none=True) if project and project.overrides else {}
    if overrides:
        text += "\n\n**Project Overrides:**\n" + "\n".join(
            f"- {key}: {value}" for key, value in overrides.items()
        )
    return text


@tool_handler("Error retrieving styling guidelines")
async def get_styling_guide(
    ctx: ToolContext,
    query: str,
    context: Optional[str] = None,
    project_path: Optional[str] = None,
) -> Envelope:
    await activate_project(ctx, project_path)

    results = await ctx.engine.search(query, context=context or "style", max_results=5)
    if not results:
        return text_response(NO_RESULTS_MESSAGE)

    logger.debug(f"get_styling_guide: {len(results)} results for '{query}'")
    return text_response(format_guidelines(results, ctx.engine.get_current_project()))
