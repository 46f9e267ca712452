"""
FrontRAG Project - Project identity, configuration and guideline loading

    - config:   typed ProjectConfig schema and validation
    - detector: path -> ProjectConfig resolution with in-memory cache
    - registry: persistent JSON registry of registered projects
    - loader:   guideline files -> Documents

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .config import (
    PROJECT_CONFIG_FILE,
    CustomRule,
    GuidelinesSettings,
    ProjectConfig,
    ProjectConfigError,
    ProjectOverrides,
    ProjectRules,
    default_project_config,
    derive_project_id,
    validate_project_config,
)
from .detector import ProjectDetector
from .loader import (
    Document,
    DocumentLoader,
    flatten_metadata,
    infer_category,
    infer_type,
    split_front_matter,
    split_sections,
)
from .registry import (
    ProjectRegistry,
    RegistryData,
    RegistryEntry,
    RegistryError,
    collection_name_for,
)

__all__ = [
    "PROJECT_CONFIG_FILE",
    "CustomRule",
    "GuidelinesSettings",
    "ProjectConfig",
    "ProjectConfigError",
    "ProjectOverrides",
    "ProjectRules",
    "default_project_config",
    "derive_project_id",
    "validate_project_config",
    "ProjectDetector",
    "Document",
    "DocumentLoader",
    "flatten_metadata",
    "infer_category",
    "infer_type",
    "split_front_matter",
    "split_sections",
    "ProjectRegistry",
    "RegistryData",
    "RegistryEntry",
    "RegistryError",
    "collection_name_for",
]
