"""
Static asset middleware.
Serves files from the public directory before requests reach logging and routing.
"""
from pathlib import Path

from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send


class StaticAssetsMiddleware:
    """Serve GET/HEAD requests that name a file under ``directory``; pass everything else on."""

    def __init__(self, app: ASGIApp, directory: str):
        self.app = app
        self.directory = Path(directory).resolve()
        self.static = StaticFiles(directory=str(self.directory), check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] in ("GET", "HEAD") and self._is_asset(scope["path"]):
            await self.static(scope, receive, send)
            return
        await self.app(scope, receive, send)

    def _is_asset(self, path: str) -> bool:
        relative = path.lstrip("/")
        if not relative or not self.directory.is_dir():
            return False
        try:
            candidate = (self.directory / relative).resolve()
            # Reject traversal outside the asset directory
            if self.directory not in candidate.parents:
                return False
            return candidate.is_file()
        except (ValueError, OSError):
            # Null bytes and over-long names are never assets
            return False
