import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

import aiohttp

from src.domain.models import GitHubMetrics, MetricsRecord, Project, RubyGem, TravisReport
from src.infrastructure.github_client import REQUEST_TIMEOUT, GitHubRestClient
from src.infrastructure.rubygems_client import RubyGemsClient
from src.infrastructure.travis_client import TravisClient

logger = logging.getLogger(__name__)

# The release lookup and the comparison run back to back inside one GitHub fetch.
DEFAULT_PROVIDER_TIMEOUT = 3 * REQUEST_TIMEOUT.total

T = TypeVar("T")


class FetchOrchestrator:
    """
    Fills a project's metrics record from the three providers.

    Only empty slots are requested, the requests run concurrently, and each
    one is bounded by provider_timeout. Any failure becomes that provider's
    sentinel record, so fetch() never raises provider errors.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        github_client: Optional[GitHubRestClient],
        rubygems_client: RubyGemsClient,
        travis_client: TravisClient,
        provider_timeout: Optional[float] = DEFAULT_PROVIDER_TIMEOUT,
    ):
        self.session = session
        self.github_client = github_client
        self.rubygems_client = rubygems_client
        self.travis_client = travis_client
        self.provider_timeout = provider_timeout

    async def _bounded(self, label: str, call: Awaitable[T], fallback: Callable[[], T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.provider_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{label} timed out after {self.provider_timeout}s")
            return fallback()
        except Exception as e:
            logger.error(f"{label} failed unexpectedly: {e}")
            return fallback()

    async def _fill_gem(self, project: Project, record: MetricsRecord) -> None:
        record.gem = await self._bounded(
            f"rubygems lookup for {project.gem_name}",
            self.rubygems_client.fetch_gem(self.session, project.gem_name),
            lambda: RubyGem.unavailable(project.gem_name),
        )

    async def _fill_travis(self, project: Project, record: MetricsRecord) -> None:
        record.travis = await self._bounded(
            f"travis lookup for {project.nwo}@{project.branch}",
            self.travis_client.fetch_report(self.session, project.nwo, project.branch),
            lambda: TravisReport.unavailable(project.nwo, project.branch),
        )

    async def _fill_github(self, project: Project, record: MetricsRecord) -> None:
        if self.github_client is None:
            record.github = GitHubMetrics.unavailable()
            return
        record.github = await self._bounded(
            f"github lookup for {project.nwo}",
            self.github_client.fetch_metrics(self.session, project.nwo, project.branch),
            GitHubMetrics.unavailable,
        )

    async def fetch(self, project: Project, record: MetricsRecord) -> None:
        """
        Backfills every empty slot of record and marks it fetched.

        Args:
            project: Identity used for the provider lookups.
            record: The record to mutate in place.
        """
        pending: List[Awaitable[None]] = []
        if record.gem is None:
            pending.append(self._fill_gem(project, record))
        if record.travis is None:
            pending.append(self._fill_travis(project, record))
        if record.github is None:
            pending.append(self._fill_github(project, record))

        if pending:
            await asyncio.gather(*pending)

        record.fetched = record.is_complete()
        logger.debug(f"Fetched {project.nwo} ({len(pending)} providers queried).")
