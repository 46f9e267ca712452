"""
FrontRAG Tools - Component templates

Templates are retrieved from the indexed guidelines; when none matches, a
short fallback explains how to add one.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
from typing import Optional

from .base import Envelope, ToolContext, activate_project, text_response, tool_handler

logger = logging.getLogger(__name__)

FALLBACK_TEMPLATES = {
    "page": "Page template not found. Please index project guidelines.",
    "modal": "Modal template not found. Please index project guidelines.",
    "form": "Form template not found. Please index project guidelines.",
    "component": "Component template not found. Please index project guidelines.",
}


def _title(component_type: str) -> str:
    return component_type[:1].upper() + component_type[1:]


def format_template(component_type: str, content: str) -> str:
    """Markdown heading plus the template, fenced as tsx unless already fenced."""
    title = _title(component_type)
    if "```" in content:
        return f"## {title} Template\n\n{content}"
    return f"## {title} Template\n\n```tsx\n{content}\n```"


def fallback_template(component_type: str) -> str:
    message = FALLBACK_TEMPLATES.get(component_type, FALLBACK_TEMPLATES["component"])
    return (
        f"## {_title(component_type)} Template\n\n"
        f"{message}\n\n"
        "To add templates:\n"
        f"1. Create a template file in `guidelines/default/templates/{component_type}.md`\n"
        "2. Run the indexing tool to add it to the database\n"
        "3. Query again to get your custom template"
    )


@tool_handler("Error retrieving component template")
async def get_component_template(
    ctx: ToolContext,
    component_type: str,
    project_path: Optional[str] = None,
) -> Envelope:
    await activate_project(ctx, project_path)

    template = await ctx.engine.get_template(component_type)
    if template:
        return text_response(format_template(component_type, template))

    logger.info(f"No indexed template for '{component_type}', using fallback")
    return text_response(fallback_template(component_type))
