"""Read-only dashboard server.

Serves the JSON views from `treesnap.queries` and, when present, a directory
of pre-built static assets. Nothing here writes to a store.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from . import queries
from .constants import DEFAULT_UI_PORT
from .registry import ProjectRegistry

logger = logging.getLogger(__name__)

INDEX_PAGE = "/main.html"


def create_app(
    root: Path,
    static_dir: Optional[Path] = None,
    registry: Optional[ProjectRegistry] = None,
) -> FastAPI:
    """Build the dashboard application for one project root.

    Args:
        root: Project whose history backs /api/commits and /api/files
        static_dir: Directory of pre-built UI assets (skipped if missing)
        registry: Registry used for the cross-project routes
    """
    registry = registry or ProjectRegistry()
    app = FastAPI(title="treesnap dashboard")

    @app.get("/api/commits")
    def commits():
        return queries.list_commits(root)

    @app.get("/api/files")
    def files():
        return queries.latest_files(root)

    @app.get("/api/projects")
    def projects():
        return queries.list_projects(registry)

    @app.get("/api/project/{name}/commits")
    def named_project_commits(name: str):
        return queries.project_commits(name, registry)

    @app.get("/api/project/{name}/files")
    def named_project_files(name: str):
        return queries.project_files(name, registry)

    @app.get("/", include_in_schema=False)
    def index():
        return RedirectResponse(INDEX_PAGE, status_code=307)

    @app.get("/project/{name}", include_in_schema=False)
    def project_page(name: str):
        return RedirectResponse(INDEX_PAGE, status_code=307)

    if static_dir is not None and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir)), name="static")
    else:
        logger.debug("No static assets at %s; serving API only", static_dir)

    return app


def serve(
    root: Path,
    port: int = DEFAULT_UI_PORT,
    static_dir: Optional[Path] = None,
) -> None:
    """Run the dashboard on localhost until interrupted."""
    import uvicorn

    app = create_app(root, static_dir=static_dir)
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")
