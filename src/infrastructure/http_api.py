import logging

from aiohttp import web

from src.application.project_cache import ProjectCache

logger = logging.getLogger(__name__)

PROJECT_CACHE = web.AppKey("project_cache", ProjectCache)


async def all_projects(request: web.Request) -> web.Response:
    cache = request.app[PROJECT_CACHE]
    entries = await cache.get_all_projects()
    return web.json_response([entry.to_dict() for entry in entries])


async def single_project(request: web.Request) -> web.Response:
    name = request.match_info["name"]
    entry = await request.app[PROJECT_CACHE].get_project(name)
    if entry is None:
        return web.json_response({"error": f"project '{name}' not found"}, status=404)
    return web.json_response(entry.to_dict())


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


def add_routes(app: web.Application) -> None:
    app.router.add_get("/", all_projects)
    app.router.add_get("/projects.json", all_projects)
    app.router.add_get("/projects/{name}.json", single_project)
    app.router.add_get("/health", health)


def create_app(cache: ProjectCache) -> web.Application:
    """Builds the JSON API around an already populated registry."""
    app = web.Application()
    app[PROJECT_CACHE] = cache
    add_routes(app)
    return app
