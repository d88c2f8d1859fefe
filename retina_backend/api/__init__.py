"""
API layer for the RetinaScan Backend.

Exposes HTTP endpoints under /api/v1 (retina analysis, inference service
status, and connection diagnostics).
"""
