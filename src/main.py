import asyncio
import contextlib
import os
import sys
import logging
from typing import Optional

import aiohttp
from aiohttp import web
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from src.application.fetch_orchestrator import DEFAULT_PROVIDER_TIMEOUT, FetchOrchestrator
from src.application.project_cache import DEFAULT_REFRESH_INTERVAL, ProjectCache
from src.application.registry import ProjectRegistry
from src.domain.exceptions import ConfigurationException
from src.domain.models import ReposConfig
from src.infrastructure import github_client as github
from src.infrastructure import travis_client as travis
from src.infrastructure.config_loader import DEFAULT_REPOS_CONFIG, load_repos_config
from src.infrastructure.http_api import create_app
from src.infrastructure.rubygems_client import RubyGemsClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Process settings read from the environment."""
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str]
    travis_token: Optional[str]
    repos_config: str
    refresh_interval: int
    provider_timeout: Optional[float]
    host: str
    port: int


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationException(f"{name} must be an integer, got '{raw}'.") from e


def load_settings() -> Settings:
    """Reads settings from the environment (and a .env file, if present)."""
    load_dotenv()

    timeout = _int_env("PROVIDER_TIMEOUT_SECONDS", int(DEFAULT_PROVIDER_TIMEOUT))
    return Settings(
        github_token=os.getenv(github.ACCESS_TOKEN_ENV_VAR) or None,
        travis_token=os.getenv(travis.ACCESS_TOKEN_ENV_VAR) or None,
        repos_config=os.getenv("REPOS_CONFIG", DEFAULT_REPOS_CONFIG),
        refresh_interval=_int_env("REFRESH_INTERVAL_SECONDS", DEFAULT_REFRESH_INTERVAL),
        # 0 disables the per-call timeout
        provider_timeout=float(timeout) if timeout > 0 else None,
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_env("PORT", 8080),
    )


async def init_app(settings: Settings, config: ReposConfig) -> web.Application:
    """
    Resolves the registry and wires the cache, the refresh loop and the HTTP routes.
    """
    if settings.github_token:
        github_client = github.GitHubRestClient(token=settings.github_token)
    else:
        logger.error(f"{github.ACCESS_TOKEN_ENV_VAR} required for GitHub")
        github_client = None

    session = aiohttp.ClientSession()
    try:
        projects = await ProjectRegistry(github_client).load(config, session)
    except Exception:
        await session.close()
        raise

    orchestrator = FetchOrchestrator(
        session=session,
        github_client=github_client,
        rubygems_client=RubyGemsClient(),
        travis_client=travis.TravisClient(token=settings.travis_token),
        provider_timeout=settings.provider_timeout,
    )
    cache = ProjectCache(projects, orchestrator)
    app = create_app(cache)

    async def refresh_loop(app: web.Application):
        task = asyncio.create_task(cache.run_refresh_loop(settings.refresh_interval))
        yield
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def close_session(app: web.Application) -> None:
        await session.close()

    app.cleanup_ctx.append(refresh_loop)
    app.on_cleanup.append(close_session)
    return app


def main() -> None:
    try:
        settings = load_settings()
        config = load_repos_config(settings.repos_config)
        web.run_app(init_app(settings, config), host=settings.host, port=settings.port)
    except ConfigurationException as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user. Exiting gracefully.")


if __name__ == "__main__":
    main()
