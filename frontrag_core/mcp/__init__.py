"""
FrontRAG MCP - FastMCP server exposing the frontend guideline tools.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""
