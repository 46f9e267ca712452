"""
FrontRAG Tools - Handlers behind the MCP tool surface

Every handler is ``async handler(ctx: ToolContext, **arguments)`` and
returns ``{"content": [{"type": "text", "text": ...}], "isError"?: True}``.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .base import (
    Envelope,
    ToolContext,
    envelope_text,
    error_response,
    text_response,
    tool_handler,
)
from .collection import (
    create_project_collection,
    get_project_info,
    index_guidelines,
    list_project_collections,
    switch_project,
    update_project_guidelines,
)
from .registry import (
    add_guideline,
    export_guidelines,
    import_guidelines,
    list_registered_projects,
    migrate_project,
    register_project,
)
from .styling import get_styling_guide
from .template import get_component_template
from .validator import validate_code_style

__all__ = [
    "Envelope",
    "ToolContext",
    "envelope_text",
    "error_response",
    "text_response",
    "tool_handler",
    "get_styling_guide",
    "get_component_template",
    "validate_code_style",
    "switch_project",
    "index_guidelines",
    "create_project_collection",
    "update_project_guidelines",
    "list_project_collections",
    "get_project_info",
    "register_project",
    "add_guideline",
    "list_registered_projects",
    "import_guidelines",
    "export_guidelines",
    "migrate_project",
]
