"""Jupyter Server extension compiling JavaScript cells on request."""
from .handlers import setup_handlers

__all__ = ["setup_handlers"]


def _jupyter_server_extension_points():
    return [{"module": "jscells_server"}]


def _load_jupyter_server_extension(server_app):
    setup_handlers(server_app)
    cfg = server_app.web_app.settings.get("jscells_config") or {}
    server_app.log.info("jscells extension loaded (builtins file: %s)", cfg.get("builtins_file") or "default")
