import asyncio
import logging
from typing import Any, Dict, List, Optional

from src.application.fetch_orchestrator import FetchOrchestrator
from src.domain.models import MetricsRecord, Project, to_output_record

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30 * 60  # Seconds between cache resets


class CachedProject:
    """
    A tracked project together with its cached metrics.

    The lock serialises fetch and reset on this record, so a reset issued
    during a fetch takes effect after the fetch completes.
    """

    def __init__(self, project: Project):
        self.project = project
        self.record = MetricsRecord()
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self.project.name

    @property
    def fetched(self) -> bool:
        return self.record.fetched

    async def fetch(self, orchestrator: FetchOrchestrator) -> None:
        async with self._lock:
            await orchestrator.fetch(self.project, self.record)

    async def ensure_fetched(self, orchestrator: FetchOrchestrator) -> None:
        async with self._lock:
            if not self.record.fetched:
                await orchestrator.fetch(self.project, self.record)

    async def reset(self) -> None:
        async with self._lock:
            self.record.clear()

    def to_dict(self) -> Dict[str, Any]:
        return to_output_record(self.project, self.record)


class ProjectCache:
    """
    In-memory cache of every tracked project's metrics.

    Records are filled on demand and cleared periodically by run_refresh_loop();
    the next access after a clear fetches again.
    """

    def __init__(self, projects: List[Project], orchestrator: FetchOrchestrator):
        self.orchestrator = orchestrator
        self._entries = [CachedProject(project) for project in projects]
        self._by_name: Optional[Dict[str, CachedProject]] = None

    def _build_index(self) -> Dict[str, CachedProject]:
        # Later entries win when two projects share a short name.
        return {entry.name: entry for entry in self._entries}

    async def get_project(self, name: str) -> Optional[CachedProject]:
        """
        Looks up a project by short name, fetching its metrics first if the record is empty.

        Returns:
            The cached project, or None if no project has that name.
        """
        if self._by_name is None:
            self._by_name = self._build_index()

        entry = self._by_name.get(name)
        if entry is None:
            return None

        await entry.ensure_fetched(self.orchestrator)
        return entry

    async def get_all_projects(self) -> List[CachedProject]:
        """
        Fetches every project concurrently and returns them all once every fetch has finished.
        """
        await asyncio.gather(*(entry.fetch(self.orchestrator) for entry in self._entries))
        return self._entries

    def get_projects(self) -> List[CachedProject]:
        """Returns all projects as they are, without fetching."""
        return self._entries

    async def reset_all(self) -> None:
        await asyncio.gather(*(entry.reset() for entry in self._entries))

    async def run_refresh_loop(self, interval: float = DEFAULT_REFRESH_INTERVAL) -> None:
        """
        Clears every record each interval, forever. Records are refetched lazily on next access.
        """
        while True:
            await asyncio.sleep(interval)
            logger.info("resetting projects' cache")
            await self.reset_all()
