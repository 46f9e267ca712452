"""
FrontRAG Tools - Shared plumbing

Tool handlers are plain async functions ``handler(ctx, **arguments)``
returning the uniform envelope:

    {"content": [{"type": "text", "text": "..."}], "isError": True?}

Handlers never raise: ``tool_handler`` catches every exception at the
boundary, logs it and re-encodes it in-band.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import functools
import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from ..config import FrontRAGConfig
from ..project.config import ProjectConfig
from ..project.detector import ProjectDetector
from ..project.registry import ProjectRegistry
from ..rag.engine import RAGEngine

logger = logging.getLogger(__name__)

Envelope = Dict[str, Any]


@dataclass
class ToolContext:
    """Services shared by all tool handlers of one server instance."""
    engine: RAGEngine
    detector: ProjectDetector
    registry: ProjectRegistry
    config: FrontRAGConfig

    @classmethod
    def from_config(cls, config: FrontRAGConfig, engine: Optional[RAGEngine] = None) -> "ToolContext":
        paths = config.paths
        paths.ensure_dirs()
        return cls(
            engine=engine or RAGEngine(config),
            detector=ProjectDetector(),
            registry=ProjectRegistry(
                paths.projects_dir,
                registry_path=paths.registry_path,
                collection_prefix=config.chroma.collection_prefix,
            ),
            config=config,
        )


def text_response(text: str) -> Envelope:
    return {"content": [{"type": "text", "text": text}]}


def error_response(text: str) -> Envelope:
    return {"content": [{"type": "text", "text": text}], "isError": True}


def envelope_text(envelope: Envelope) -> str:
    """Concatenated text parts of an envelope."""
    return "\n".join(part.get("text", "") for part in envelope.get("content", []))


def tool_handler(error_prefix: str) -> Callable:
    """
    Wrap an async handler so that any exception becomes an error envelope.

    Args:
        error_prefix: Human-readable prefix, e.g. "Error indexing guidelines"
    """
    def decorator(func: Callable[..., Awaitable[Envelope]]) -> Callable[..., Awaitable[Envelope]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Envelope:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {e}", exc_info=True)
                return error_response(f"{error_prefix}: {e}")
        return wrapper
    return decorator


def require(value: Any, message: str) -> None:
    if not value:
        raise ValueError(message)


async def activate_project(ctx: ToolContext, project_path: Optional[str]) -> Optional[ProjectConfig]:
    """Resolve and load a project into the engine when a path is given."""
    if not project_path:
        return None
    project = ctx.detector.load_project(project_path)
    await ctx.engine.load_project(project)
    return project


def resolve_project(ctx: ToolContext, project_path: Optional[str]) -> ProjectConfig:
    """Resolve a project path, defaulting to the working directory."""
    return ctx.detector.load_project(project_path or os.getcwd())
