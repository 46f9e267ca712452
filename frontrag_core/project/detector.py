"""
FrontRAG Project - Project Detector

Resolves a filesystem path to a ProjectConfig and caches the result for the
life of the process. A project needs no on-disk configuration: without a
``.mcp-project.json`` the config is synthesized from the directory name.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import (
    PROJECT_CONFIG_FILE,
    ProjectConfig,
    ProjectConfigError,
    default_project_config,
    derive_project_id,
    validate_project_config,
)

logger = logging.getLogger(__name__)


class ProjectDetector:
    """
    Path -> ProjectConfig resolution with an in-memory cache.

    The detector owns its cache; switching the current project never evicts
    other entries.
    """

    def __init__(self):
        self._current_project: Optional[ProjectConfig] = None
        self._project_cache: Dict[str, ProjectConfig] = {}

    @staticmethod
    def _cache_key(project_path: Union[str, Path]) -> str:
        return os.path.abspath(os.path.expanduser(str(project_path)))

    def load_project(self, project_path: Union[str, Path]) -> ProjectConfig:
        """
        Resolve a project directory to its configuration.

        Cache hit returns the cached config. On a miss, ``.mcp-project.json``
        is read if present, otherwise the config is built from the path's
        basename with stock defaults.

        Raises:
            ProjectConfigError: the project's config file is invalid
        """
        key = self._cache_key(project_path)
        cached = self._project_cache.get(key)
        if cached is not None:
            self._current_project = cached
            return cached

        config_file = Path(key) / PROJECT_CONFIG_FILE
        if config_file.is_file():
            config = self._read_config_file(config_file, key)
        else:
            name = Path(key).name or "unnamed-project"
            config = default_project_config(
                project_id=derive_project_id(key),
                name=name,
                root_path=key,
            )

        self._project_cache[key] = config
        self._current_project = config
        logger.info(f"Loaded project: {config.name} ({config.id})")
        return config

    def _read_config_file(self, config_file: Path, root_path: str) -> ProjectConfig:
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ProjectConfigError(f"Cannot read {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ProjectConfigError(f"{config_file} must contain a JSON object")

        base = default_project_config(
            project_id=derive_project_id(root_path),
            name=Path(root_path).name,
            root_path=root_path,
        ).to_json_dict()
        base.update(data)
        base["rootPath"] = root_path
        base.pop("root_path", None)
        return validate_project_config(base)

    def detect_current_project(self, start_path: Optional[Union[str, Path]] = None) -> Optional[ProjectConfig]:
        """
        Walk upward from start_path looking for ``.mcp-project.json``.

        Returns:
            The loaded ProjectConfig, or None when no config file is found
        """
        current = Path(os.path.abspath(os.path.expanduser(str(start_path or Path.cwd()))))
        while True:
            if (current / PROJECT_CONFIG_FILE).is_file():
                return self.load_project(current)
            if current.parent == current:
                break
            current = current.parent

        logger.info("No project config found; use switch_project to load a specific project")
        return None

    def create_project_config(
        self,
        project_path: Union[str, Path],
        config: Optional[Dict[str, Any]] = None,
    ) -> ProjectConfig:
        """
        Validate a project configuration and persist it as ``.mcp-project.json``.

        Args:
            project_path: Project root directory
            config: Partial config (camelCase or snake_case keys)

        Returns:
            The validated ProjectConfig (also cached and made current)

        Raises:
            ProjectConfigError: schema violation (nothing is written)
        """
        key = self._cache_key(project_path)
        config = dict(config or {})
        name = config.get("name") or Path(key).name or "unnamed-project"

        data = default_project_config(
            project_id=config.get("id") or f"project-{int(time.time() * 1000)}",
            name=name,
            root_path=key,
        ).to_json_dict()
        data.update(config)
        data["name"] = name
        data["rootPath"] = key
        data.pop("root_path", None)

        validated = validate_project_config(data)

        config_file = Path(key) / PROJECT_CONFIG_FILE
        payload = validated.to_json_dict()
        payload.pop("rootPath", None)
        config_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")

        self._project_cache[key] = validated
        self._current_project = validated
        logger.info(f"Created project config for: {name}")
        return validated

    def get_current_project(self) -> Optional[ProjectConfig]:
        return self._current_project

    def clear_cache(self) -> None:
        self._project_cache.clear()
        self._current_project = None
