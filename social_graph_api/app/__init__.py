"""
Application package initializer.

Contains the FastAPI entrypoint and its submodules: ``core`` (settings,
logging, database), ``schemas``, ``services`` and the versioned
``api``.
"""

from .main import app  # noqa: F401
