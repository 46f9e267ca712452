"""
Entry point for ``python -m frontrag_core.mcp``.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from frontrag_core.mcp.server import main

if __name__ == "__main__":
    main()
