import aiohttp
import logging

from src.domain.models import RubyGem
from src.infrastructure.acl import RubyGemsTranslator
from src.infrastructure.github_client import LOOKUP_ERRORS, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class RubyGemsClient:
    """Looks up the latest published release of a gem on RubyGems.org."""

    def __init__(self, base_url: str = "https://rubygems.org"):
        self.headers = {
            "Accept": "application/json",
            "User-Agent": "project-health-dashboard",
        }
        self.api_url = base_url.rstrip("/")

    async def fetch_gem(self, session: aiohttp.ClientSession, gem_name: str) -> RubyGem:
        if not gem_name:
            return RubyGem.unavailable()

        try:
            async with session.get(
                f"{self.api_url}/api/v1/gems/{gem_name}.json", headers=self.headers, timeout=REQUEST_TIMEOUT
            ) as response:
                response.raise_for_status()
                data = await response.json()
            return RubyGemsTranslator.to_domain(data)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching gem {gem_name}: {e}")
            return RubyGem.unavailable(gem_name)
