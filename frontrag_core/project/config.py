"""
FrontRAG Project - Configuration Schema

Typed project configuration with explicit defaults and a single validation
entry point. Field names are snake_case in Python and camelCase on disk
(``.mcp-project.json``), e.g. ``vector_db_collection`` <-> ``vectorDbCollection``.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

# =============================================================================
# Constants
# =============================================================================

PROJECT_CONFIG_FILE = ".mcp-project.json"
DEFAULT_GUIDELINES_PATH = "./.mcp-guidelines"
DEFAULT_PROJECT_VERSION = "1.0.0"

StylingChoice = Literal["css-modules", "styled-components", "tailwind", "sass"]
ComponentStructure = Literal["atomic", "feature-based", "domain-driven"]
NamingConvention = Literal["camelCase", "PascalCase", "kebab-case"]
UpdateFrequency = Literal["on-save", "on-commit", "manual"]


class ProjectConfigError(ValueError):
    """Raised when a project configuration fails schema validation."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


# =============================================================================
# Schema
# =============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProjectOverrides(_CamelModel):
    """Project-level preferences that take precedence over default guidelines."""
    styling: Optional[StylingChoice] = None
    component_structure: Optional[ComponentStructure] = None
    naming_convention: Optional[NamingConvention] = None


class CustomRule(_CamelModel):
    """A regex rule; code matching ``pattern`` is reported with ``message``."""
    name: str
    pattern: str
    message: str

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value


class ProjectRules(_CamelModel):
    enforce_strict: bool = True
    allow_exceptions: List[str] = Field(default_factory=list)
    custom_rules: List[CustomRule] = Field(default_factory=list)


class GuidelinesSettings(_CamelModel):
    path: str = DEFAULT_GUIDELINES_PATH
    auto_index: bool = True
    update_frequency: UpdateFrequency = "on-save"


class ProjectConfig(_CamelModel):
    """
    Configuration of one frontend project.

    ``root_path`` is the project directory the config was resolved from; it
    anchors the relative ``guidelines.path``.
    """
    id: str
    name: str
    version: str = DEFAULT_PROJECT_VERSION
    vector_db_collection: Optional[str] = None
    priority: float = 1.0
    overrides: Optional[ProjectOverrides] = None
    rules: Optional[ProjectRules] = None
    guidelines: Optional[GuidelinesSettings] = None
    root_path: Optional[str] = None

    @field_validator("priority")
    @classmethod
    def _priority_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("priority must be >= 0")
        return value

    def guidelines_dir(self) -> Path:
        """Absolute guidelines directory (root_path / guidelines.path)."""
        rel = self.guidelines.path if self.guidelines else DEFAULT_GUIDELINES_PATH
        root = Path(self.root_path) if self.root_path else Path.cwd()
        return (root / rel).resolve()

    def to_json_dict(self) -> Dict[str, Any]:
        """camelCase dict suitable for ``.mcp-project.json``."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Helpers
# =============================================================================

def derive_project_id(project_path: Union[str, Path]) -> str:
    """
    Deterministic project id from the last path segment.

    Lowercased; every character outside ``[a-z0-9-]`` becomes ``-``.
    """
    name = Path(os.path.abspath(os.path.expanduser(str(project_path)))).name or "unnamed-project"
    return re.sub(r"[^a-z0-9-]", "-", name.lower())


def default_project_config(
    project_id: str,
    name: str,
    root_path: Optional[str] = None,
) -> ProjectConfig:
    """ProjectConfig populated with the stock overrides, rules and guidelines."""
    return ProjectConfig(
        id=project_id,
        name=name,
        version=DEFAULT_PROJECT_VERSION,
        priority=1.0,
        overrides=ProjectOverrides(
            styling="css-modules",
            component_structure="atomic",
            naming_convention="PascalCase",
        ),
        rules=ProjectRules(),
        guidelines=GuidelinesSettings(),
        root_path=root_path,
    )


def _error_fields(error: ValidationError) -> List[str]:
    return [".".join(str(part) for part in err["loc"]) for err in error.errors()]


def validate_project_config(data: Dict[str, Any]) -> ProjectConfig:
    """
    Single validation entry point for project configuration dicts.

    Accepts camelCase (on-disk) or snake_case keys.

    Raises:
        ProjectConfigError: listing every invalid field path
    """
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        fields = _error_fields(e)
        raise ProjectConfigError(
            f"Invalid project configuration ({', '.join(fields)}): {e}",
            fields=fields,
        ) from e
