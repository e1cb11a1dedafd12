"""
Top-level package for the HomeHero API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``homehero_api.app.main:app``.
"""

__all__ = []
