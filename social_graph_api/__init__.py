"""
Top-level package for the Social Graph API.

All functionality lives in submodules under ``app``; run the service
with ``uvicorn social_graph_api.app.main:app``.
"""

__all__ = []
