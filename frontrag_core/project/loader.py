"""
FrontRAG Project - Guideline Document Loader

Walks a guidelines directory and turns each file into a normalized
``Document`` (content + flat metadata) ready for the vector store.

Supported formats:
    - Markdown / MDX: YAML front matter merged into metadata, body as content
    - JSON: pretty-printed as content, ``type = "config"``
    - Plain text: raw content

Per-file failures are logged and skipped; a load never fails as a whole.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import json
import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from .config import ProjectConfig

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SUPPORTED_EXTENSIONS = {".md", ".mdx", ".txt", ".json"}
MARKDOWN_EXTENSIONS = {".md", ".mdx"}
EXCLUDED_DIRS = {"node_modules", ".git", "dist"}

# Directory names that mark a guidelines root, never a category
RESERVED_DIR_NAMES = {"guidelines", "default", ".mcp-guidelines"}

# Path substring -> document type, first match wins
TYPE_HEURISTICS: List[Tuple[Tuple[str, ...], str]] = [
    (("style", "css"), "style"),
    (("component",), "component"),
    (("template",), "template"),
    (("pattern",), "pattern"),
    (("performance",), "performance"),
    (("test",), "testing"),
]

_SECTION_SPLIT = re.compile(r"^##\s+", re.MULTILINE)

MetadataValue = Union[str, int, float, bool]


@dataclass
class Document:
    """A guideline ready for indexing."""
    id: str
    content: str
    metadata: Dict[str, MetadataValue] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.metadata.get("title", ""))

    @property
    def source(self) -> str:
        return str(self.metadata.get("source", ""))


# =============================================================================
# Parsing helpers
# =============================================================================

def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a YAML front-matter block from a markdown body.

    Returns:
        (front_matter_dict, body). Without a front-matter block the dict is
        empty and the body is the whole text.

    Raises:
        yaml.YAMLError: front matter present but not valid YAML
        ValueError: front matter is valid YAML but not a mapping
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text

    end_idx = -1
    for i in range(1, len(lines)):
        if lines[i].strip() in ("---", "..."):
            end_idx = i
            break
    if end_idx < 0:
        return {}, text

    raw = "\n".join(lines[1:end_idx])
    data = yaml.safe_load(raw) if raw.strip() else {}
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("front matter must be a mapping")

    body = "\n".join(lines[end_idx + 1:])
    return data, body


def flatten_metadata(metadata: Dict[str, Any]) -> Dict[str, MetadataValue]:
    """
    Make metadata acceptable to the vector store.

    The store only takes scalar values: lists become comma-joined strings,
    dates become ISO strings, mappings become JSON, ``None`` is dropped.
    """
    flat: Dict[str, MetadataValue] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, bool) or isinstance(value, (int, float, str)):
            flat[str(key)] = value
        elif isinstance(value, (list, tuple, set)):
            flat[str(key)] = ",".join(str(v) for v in value)
        elif isinstance(value, (datetime, date)):
            flat[str(key)] = value.isoformat()
        elif isinstance(value, dict):
            flat[str(key)] = json.dumps(value, sort_keys=True, default=str)
        else:
            flat[str(key)] = str(value)
    return flat


def infer_type(relative_path: str) -> str:
    """Guess a document type from path substrings."""
    path = relative_path.lower()
    for needles, doc_type in TYPE_HEURISTICS:
        if any(needle in path for needle in needles):
            return doc_type
    return "general"


def infer_category(relative_path: str) -> str:
    """Nearest ancestor directory that is not a reserved guidelines-root name."""
    parts = Path(relative_path).parts[:-1]
    for part in reversed(parts):
        if part not in RESERVED_DIR_NAMES:
            return part
    return "general"


def split_sections(body: str, title: Optional[str] = None) -> List[Tuple[int, str, str]]:
    """
    Split a markdown body on level-2 headings.

    Returns:
        List of (index, section_title, section_text) for non-empty sections.
        ``index`` is the position in the raw split, so a body opening with a
        heading has no section 0. The first section is titled with ``title``
        (or ``Introduction``) and keeps its full text; later sections use
        their heading line as title.
    """
    sections: List[Tuple[int, str, str]] = []
    for i, raw in enumerate(_SECTION_SPLIT.split(body)):
        section = raw.strip()
        if not section:
            continue
        if i == 0:
            sections.append((i, title or "Introduction", section))
        else:
            heading, _, rest = section.partition("\n")
            sections.append((i, heading.strip(), rest.strip()))
    return sections


# =============================================================================
# Loader
# =============================================================================

class DocumentLoader:
    """
    Load guideline files into Documents.

    Usage:
        loader = DocumentLoader()
        docs = loader.load_guidelines("/path/to/.mcp-guidelines")
    """

    def __init__(self, extensions: Optional[set] = None, excluded_dirs: Optional[set] = None):
        self.extensions = extensions or SUPPORTED_EXTENSIONS
        self.excluded_dirs = excluded_dirs or EXCLUDED_DIRS

    def find_guideline_files(self, root_dir: Union[str, Path]) -> Iterator[Path]:
        """Yield supported files under root_dir in a stable order."""
        root = Path(root_dir)
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.suffix.lower() in self.extensions:
                    yield path

    def load_guidelines(
        self,
        root_dir: Union[str, Path],
        project_name: Optional[str] = None,
    ) -> List[Document]:
        """
        Load every guideline under root_dir, one Document per file.

        Args:
            root_dir: Guidelines directory
            project_name: Stored as ``metadata.project`` when given

        Returns:
            Documents that loaded successfully (empty if root_dir is missing)
        """
        root = Path(root_dir)
        if not root.is_dir():
            logger.warning(f"Guidelines directory not found: {root}")
            return []

        documents = []
        for path in self.find_guideline_files(root):
            doc = self.load_document(path, root, project_name)
            if doc is not None:
                documents.append(doc)

        logger.info(f"Loaded {len(documents)} documents from {root}")
        return documents

    def load_project_guidelines(self, project: ProjectConfig) -> List[Document]:
        """Load the guidelines directory configured for a project."""
        return self.load_guidelines(project.guidelines_dir(), project_name=project.name)

    def load_default_guidelines(self, default_dir: Union[str, Path]) -> List[Document]:
        """Load the shared default guideline set (no project tag)."""
        return self.load_guidelines(default_dir)

    def load_document(
        self,
        path: Path,
        root: Path,
        project_name: Optional[str] = None,
    ) -> Optional[Document]:
        """Parse a single file; returns None (and logs) on any failure."""
        try:
            text = path.read_text(encoding="utf-8")
            ext = path.suffix.lower()
            relative = path.relative_to(root).as_posix()

            if ext in MARKDOWN_EXTENSIONS:
                content, metadata = self._parse_markdown(text, path, relative)
            elif ext == ".json":
                content, metadata = self._parse_json(text, path, relative)
            else:
                content = text
                metadata = self._base_metadata(path, relative)

            if project_name:
                metadata["project"] = project_name

            return Document(
                id=str(uuid.uuid4()),
                content=content,
                metadata=flatten_metadata(metadata),
            )
        except Exception as e:
            logger.error(f"Failed to load document {path}: {e}")
            return None

    def load_sections(
        self,
        root_dir: Union[str, Path],
        project_name: Optional[str] = None,
    ) -> List[Document]:
        """
        Load markdown guidelines split into level-2 sections.

        One Document per non-empty section, id ``<relative path>_section_<i>``.
        Non-markdown files are skipped.
        """
        root = Path(root_dir)
        if not root.is_dir():
            logger.warning(f"Guidelines directory not found: {root}")
            return []

        documents = []
        for path in self.find_guideline_files(root):
            if path.suffix.lower() not in MARKDOWN_EXTENSIONS:
                continue
            try:
                documents.extend(self._section_documents(path, root, project_name))
            except Exception as e:
                logger.error(f"Failed to load document {path}: {e}")

        logger.info(f"Loaded {len(documents)} sections from {root}")
        return documents

    # -------------------------------------------------------------------------
    # Format-specific parsing
    # -------------------------------------------------------------------------

    def _section_documents(self, path: Path, root: Path, project_name: Optional[str]) -> List[Document]:
        front, body = split_front_matter(path.read_text(encoding="utf-8"))
        relative = path.relative_to(root).as_posix()

        documents = []
        for index, title, text in split_sections(body, front.get("title")):
            metadata = {
                "source": str(path),
                "title": title,
                "type": front.get("type") or "general",
                "category": front.get("category") or "general",
                "section_index": index,
                "project": project_name or "default",
            }
            documents.append(Document(
                id=f"{relative}_section_{index}",
                content=f"{title}\n\n{text}",
                metadata=flatten_metadata(metadata),
            ))
        return documents

    def _base_metadata(self, path: Path, relative: str) -> Dict[str, Any]:
        return {
            "source": str(path),
            "type": infer_type(relative),
            "category": infer_category(relative),
            "title": path.stem,
        }

    def _parse_markdown(self, text: str, path: Path, relative: str) -> Tuple[str, Dict[str, Any]]:
        front, body = split_front_matter(text)
        metadata: Dict[str, Any] = dict(front)
        metadata["source"] = str(path)
        metadata["type"] = front.get("type") or infer_type(relative)
        metadata["category"] = front.get("category") or infer_category(relative)
        metadata["title"] = front.get("title") or path.stem
        return body.strip(), metadata

    def _parse_json(self, text: str, path: Path, relative: str) -> Tuple[str, Dict[str, Any]]:
        data = json.loads(text)
        metadata = self._base_metadata(path, relative)
        if isinstance(data, dict) and isinstance(data.get("metadata"), dict):
            # null values never erase the base title/category
            metadata.update({k: v for k, v in data["metadata"].items() if v is not None})
            metadata["source"] = str(path)
        metadata["type"] = "config"
        return json.dumps(data, indent=2), metadata
