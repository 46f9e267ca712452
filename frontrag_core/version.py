"""
FrontRAG Version Management - Centralized version for all components

Single source of truth for the FrontRAG version. The MCP server, the CLI and
the packaging metadata all read from here.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

# =============================================================================
# FrontRAG Version - Single Source of Truth
# =============================================================================

__version__ = "0.4.2"

VERSION_MAJOR = 0
VERSION_MINOR = 4
VERSION_PATCH = 2
VERSION_SUFFIX = ""  # e.g., "alpha", "beta", "rc1", ""

BUILD_DATE = "2026-10-19"
BUILD_ORG = "Adservio"

VERSION_FULL = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
if VERSION_SUFFIX:
    VERSION_FULL = f"{VERSION_FULL}-{VERSION_SUFFIX}"


def get_version() -> str:
    """Get the current FrontRAG version string."""
    return __version__


def get_version_info() -> dict:
    """Get detailed version information."""
    return {
        "version": __version__,
        "major": VERSION_MAJOR,
        "minor": VERSION_MINOR,
        "patch": VERSION_PATCH,
        "suffix": VERSION_SUFFIX,
        "full": VERSION_FULL,
        "build_date": BUILD_DATE,
        "organization": BUILD_ORG,
    }


def get_short_banner() -> str:
    """Get a compact version banner."""
    return (
        f"frontrag v{__version__} | MCP server for frontend development guidelines"
    )

