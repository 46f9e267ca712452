"""
FrontRAG Project - Project Registry

File-backed identity map of registered projects, keyed by absolute project
path and stored as a single JSON document:

    {
      "version": "1.0.0",
      "projects": {"<projectPath>": {id, name, projectPath, registered,
                                     lastAccessed, collectionName,
                                     guidelinesPath}},
      "lastUpdated": "<iso timestamp>"
    }

Every mutation rewrites the whole file (temp file + rename) while holding an
exclusive advisory lock on a sibling ``.lock`` file (POSIX only), so
read-modify-write cycles from several server processes do not interleave.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import contextlib
import json
import logging
import os
import random
import re
import string
import tempfile
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "1.0.0"
DEFAULT_COLLECTION_PREFIX = "mcp_frontend"


class RegistryError(RuntimeError):
    """The registry file cannot be read or written."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_project_id() -> str:
    """``project-<epoch ms>-<random base36>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"project-{int(time.time() * 1000)}-{suffix}"


def collection_name_for(project_id: str, prefix: str = DEFAULT_COLLECTION_PREFIX) -> str:
    """Collection name derived once at registration time."""
    return f"{prefix}_{re.sub(r'[^a-zA-Z0-9_]', '_', project_id)}"


# =============================================================================
# Data Model
# =============================================================================

@dataclass
class RegistryEntry:
    """One registered project."""
    id: str
    name: str
    project_path: str
    registered: str
    last_accessed: str
    collection_name: str
    guidelines_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "projectPath": self.project_path,
            "registered": self.registered,
            "lastAccessed": self.last_accessed,
            "collectionName": self.collection_name,
            "guidelinesPath": self.guidelines_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryEntry":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            project_path=data["projectPath"],
            registered=data.get("registered", ""),
            last_accessed=data.get("lastAccessed", ""),
            collection_name=data["collectionName"],
            guidelines_path=data["guidelinesPath"],
        )


@dataclass
class RegistryData:
    """The whole registry document."""
    version: str = REGISTRY_VERSION
    projects: Dict[str, RegistryEntry] = field(default_factory=dict)
    last_updated: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "projects": {path: entry.to_dict() for path, entry in self.projects.items()},
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryData":
        return cls(
            version=data.get("version", REGISTRY_VERSION),
            projects={
                path: RegistryEntry.from_dict(entry)
                for path, entry in (data.get("projects") or {}).items()
            },
            last_updated=data.get("lastUpdated", _now_iso()),
        )


# =============================================================================
# Registry
# =============================================================================

class ProjectRegistry:
    """
    Persistent project registry.

    Usage:
        registry = ProjectRegistry(paths.projects_dir)
        entry = registry.register_project("/path/to/app", name="App")
        registry.get_project_by_id(entry.id)
    """

    def __init__(
        self,
        projects_dir: Union[str, Path],
        registry_path: Optional[Union[str, Path]] = None,
        collection_prefix: str = DEFAULT_COLLECTION_PREFIX,
    ):
        self.projects_dir = Path(projects_dir)
        self.registry_path = Path(registry_path) if registry_path else self.projects_dir / "registry.json"
        self.collection_prefix = collection_prefix
        self.projects_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def normalize_path(project_path: Union[str, Path]) -> str:
        return os.path.abspath(os.path.expanduser(str(project_path)))

    @contextlib.contextmanager
    def locked(self):
        """Exclusive advisory lock around a read-modify-write of the registry."""
        lock_path = self.registry_path.with_suffix(self.registry_path.suffix + ".lock")
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(lock_path, "a+", encoding="utf-8") as handle:
            if os.name == "posix":
                import fcntl
                fcntl.flock(handle, fcntl.LOCK_EX)
            try:
                yield
            finally:
                if os.name == "posix":
                    fcntl.flock(handle, fcntl.LOCK_UN)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load_registry(self) -> RegistryData:
        """
        Read the registry, creating and persisting an empty one if missing.

        Raises:
            RegistryError: file exists but is unreadable or corrupt
        """
        if not self.registry_path.exists():
            registry = RegistryData()
            self.save_registry(registry)
            return registry

        try:
            with open(self.registry_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return RegistryData.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load registry {self.registry_path}: {e}")
            raise RegistryError(f"Failed to load registry: {e}") from e

    def save_registry(self, registry: RegistryData) -> None:
        """Rewrite the registry file (stamps ``lastUpdated``)."""
        registry.last_updated = _now_iso()
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.registry_path.parent), prefix=".registry-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(registry.to_dict(), f, indent=2)
            os.replace(tmp_path, self.registry_path)
        except OSError as e:
            logger.error(f"Failed to save registry {self.registry_path}: {e}")
            raise RegistryError(f"Failed to save registry: {e}") from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def register_project(
        self,
        project_path: Union[str, Path],
        project_id: Optional[str] = None,
        name: Optional[str] = None,
        collection_name: Optional[str] = None,
    ) -> RegistryEntry:
        """
        Register a project; idempotent by path.

        Returns:
            The new entry, or the existing one if the path is already registered
        """
        path = self.normalize_path(project_path)
        with self.locked():
            registry = self.load_registry()

            existing = registry.projects.get(path)
            if existing is not None:
                logger.info(f"Project already registered: {existing.id}")
                return existing

            project_id = project_id or generate_project_id()
            guidelines_path = self.get_guidelines_path(project_id)
            guidelines_path.mkdir(parents=True, exist_ok=True)

            now = _now_iso()
            entry = RegistryEntry(
                id=project_id,
                name=name or f"Project {project_id}",
                project_path=path,
                registered=now,
                last_accessed=now,
                collection_name=collection_name or collection_name_for(project_id, self.collection_prefix),
                guidelines_path=str(guidelines_path),
            )

            registry.projects[path] = entry
            self.save_registry(registry)
        logger.info(f"Registered project: {project_id} at {path}")
        return entry

    def get_project_by_path(self, project_path: Union[str, Path]) -> Optional[RegistryEntry]:
        """Look up by path; a hit also stamps and persists ``lastAccessed``."""
        path = self.normalize_path(project_path)
        with self.locked():
            registry = self.load_registry()
            entry = registry.projects.get(path)
            if entry is None:
                return None

            entry.last_accessed = _now_iso()
            self.save_registry(registry)
        return entry

    def get_project_by_id(self, project_id: str) -> Optional[RegistryEntry]:
        registry = self.load_registry()
        for entry in registry.projects.values():
            if entry.id == project_id:
                return entry
        return None

    def list_projects(self) -> List[RegistryEntry]:
        return list(self.load_registry().projects.values())

    def unregister_project(self, project_path: Union[str, Path]) -> bool:
        """Remove a project entry (guideline files are left on disk)."""
        path = self.normalize_path(project_path)
        with self.locked():
            registry = self.load_registry()
            if path not in registry.projects:
                return False

            del registry.projects[path]
            self.save_registry(registry)
        logger.info(f"Unregistered project: {path}")
        return True

    def get_guidelines_path(self, project_id: str) -> Path:
        return self.projects_dir / project_id / "guidelines"
