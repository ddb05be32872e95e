from __future__ import annotations

import contextlib
from typing import Dict, Tuple

from aiohttp import web
from aiohttp.test_utils import TestServer


@contextlib.asynccontextmanager
async def serve_lists(routes: Dict[str, Tuple[int, str]]):
    """Serve {path: (status, body)} on localhost; unknown paths are 404."""
    requested = []

    async def handler(request: web.Request) -> web.Response:
        requested.append(request.path)
        status, body = routes.get(request.path, (404, "not found"))
        return web.Response(status=status, text=body)

    app = web.Application()
    app.router.add_get("/{name:.*}", handler)
    server = TestServer(app)
    await server.start_server()
    server.requested = requested
    try:
        yield server
    finally:
        await server.close()


def list_url(server: TestServer, path: str) -> str:
    return str(server.make_url(path))
