import aiohttp
import logging
from typing import Optional
from urllib.parse import quote

from src.domain.models import TravisReport
from src.infrastructure.acl import TravisTranslator
from src.infrastructure.github_client import LOOKUP_ERRORS, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV_VAR = "TRAVIS_API_TOKEN"


class TravisClient:
    """
    Reads the last build of a branch from the Travis CI v3 API.
    A token is optional; public repositories can be read without one.
    """

    def __init__(self, token: Optional[str] = None, base_url: str = "https://api.travis-ci.com"):
        self.headers = {
            "Travis-API-Version": "3",
            "Accept": "application/json",
            "User-Agent": "project-health-dashboard",
        }
        if token:
            self.headers["Authorization"] = f"token {token}"
        self.api_url = base_url.rstrip("/")

    async def fetch_report(self, session: aiohttp.ClientSession, nwo: str, branch: str) -> TravisReport:
        if not nwo:
            return TravisReport.unavailable(nwo, branch)

        # The repository slug is addressed as a single path segment.
        url = f"{self.api_url}/repo/{quote(nwo, safe='')}/branch/{quote(branch, safe='')}"
        try:
            async with session.get(url, headers=self.headers, timeout=REQUEST_TIMEOUT) as response:
                response.raise_for_status()
                data = await response.json()
            return TravisTranslator.to_domain(data, nwo, branch)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching travis status for {nwo}@{branch}: {e}")
            return TravisReport.unavailable(nwo, branch)
