"""
HTTP endpoints of the jscells server extension:
 - POST /jscells/compile  {code, expr?, id?} -> {cell}
 - POST /jscells/analyze  {notebook}         -> {graph}

Settings come from the `JsCells` section of the server config, with
JSCELLS_BUILTINS / JSCELLS_EXPR taking precedence.
"""
import os
from typing import Any, Dict

from jupyter_server.base.handlers import APIHandler
from jupyter_server.utils import url_path_join

from jscells import JsCellsError, analyze_notebook, compile_cell
from jscells.notebook import capture_to_json
from jscells.utils import BUILTINS_ENV, load_builtins

CompileConfig = Dict[str, Any]

DEFAULT_COMPILE_SETTINGS: CompileConfig = {
    "builtins_file": None,
    "expr": False,
}


class _BaseHandler(APIHandler):
    def _config(self) -> CompileConfig:
        config = self.settings.get("jscells_config", DEFAULT_COMPILE_SETTINGS)
        return dict(config or {})

    def _builtins(self):
        return load_builtins(self._config().get("builtins_file"))


class CompileHandler(_BaseHandler):
    def post(self):
        data = self.get_json_body() or {}
        code = data.get("code")
        if code is None:
            self.set_status(400)
            self.finish({"error": "missing 'code'"})
            return
        expr = data.get("expr")
        if expr is None:
            expr = self._config().get("expr", False)
        try:
            cell = compile_cell(code, expr=bool(expr), builtins=self._builtins(), id=data.get("id"))
        except JsCellsError as exc:
            self.log.error("jscells compile failed: %s", exc)
            self.set_status(400)
            self.finish({"error": str(exc)})
            return
        self.finish({"cell": cell.to_dict()})


class AnalyzeHandler(_BaseHandler):
    def post(self):
        data = self.get_json_body() or {}
        nb_path = data.get("notebook")
        if not nb_path:
            self.set_status(400)
            self.finish({"error": "missing 'notebook' path"})
            return
        try:
            capture = analyze_notebook(nb_path, builtins=self._builtins())
        except (OSError, JsCellsError) as exc:
            self.log.error("jscells analysis failed: %s", exc)
            self.set_status(500)
            self.finish({"error": f"analysis failed: {exc}"})
            return
        self.finish({"graph": capture_to_json(capture)})


def setup_handlers(server_app):
    host_app = server_app.web_app
    base_url = host_app.settings.get("base_url", "/")
    pattern = url_path_join(base_url, "jscells")
    host_app.settings["jscells_config"] = _load_compile_config(server_app)
    host_app.add_handlers(".*$", [
        (url_path_join(pattern, "compile"), CompileHandler),
        (url_path_join(pattern, "analyze"), AnalyzeHandler),
    ])


def _merge_configs(defaults: CompileConfig, override: CompileConfig) -> CompileConfig:
    merged = dict(defaults or {})
    for key, value in (override or {}).items():
        if value is not None:
            merged[key] = value
    return merged


def _load_compile_config(server_app) -> CompileConfig:
    # Priority: environment variables > explicit config > defaults
    cfg = _merge_configs(DEFAULT_COMPILE_SETTINGS, server_app.config.get("JsCells", {}))
    env_builtins = os.getenv(BUILTINS_ENV)
    env_expr = os.getenv("JSCELLS_EXPR")
    if env_builtins:
        cfg["builtins_file"] = env_builtins
    if env_expr:
        cfg["expr"] = env_expr.strip().lower() in ("1", "true", "yes")
    return cfg
