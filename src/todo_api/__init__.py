"""
FastAPI Todo API package.

The application instance lives in ``todo_api.main`` (``todo_api.main:app``);
``create_app`` builds a fresh instance for a given settings/store pair.
"""

__version__ = "0.1.0"
