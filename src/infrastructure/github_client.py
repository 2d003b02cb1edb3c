import aiohttp
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from src.domain.exceptions import ProviderException
from src.domain.models import GitHubMetrics
from src.infrastructure.acl import GitHubTranslator

logger = logging.getLogger(__name__)

ACCESS_TOKEN_ENV_VAR = "GITHUB_ACCESS_TOKEN"
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30, connect=10)
# Errors that degrade a single lookup to its sentinel value.
LOOKUP_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ProviderException, ValueError, TypeError, KeyError)


class GitHubRestClient:
    """
    Client for the GitHub REST API.
    Each lookup is a single attempt; failures are logged and reported as -1 / "".
    """

    def __init__(self, token: str, base_url: str = "https://api.github.com"):
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "project-health-dashboard",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self.api_url = base_url.rstrip("/")

    async def _get_json(
        self,
        session: aiohttp.ClientSession,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[int, Any]:
        """
        Performs a GET against the API.

        Returns:
            Tuple of (status, decoded JSON body). Bodies of 202 responses are returned as-is.
        """
        async with session.get(
            f"{self.api_url}{path}", params=params, headers=self.headers, timeout=REQUEST_TIMEOUT
        ) as response:
            response.raise_for_status()
            return response.status, await response.json()

    async def list_org_repos(self, session: aiohttp.ClientSession, org: str) -> List[str]:
        """
        Lists the full names of an organization's repositories, first page only, in API order.
        Returns an empty list if the listing fails.
        """
        try:
            _, data = await self._get_json(session, f"/orgs/{org}/repos")
            return GitHubTranslator.full_names(data)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching org's repos {org}: {e}")
            return []

    async def open_issues(self, session: aiohttp.ClientSession, owner: str, repo: str) -> int:
        """Open issues plus open pull requests, as GitHub reports it."""
        try:
            _, data = await self._get_json(session, f"/repos/{owner}/{repo}")
            return GitHubTranslator.open_issues_count(data)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching repo {owner}/{repo}: {e}")
            return -1

    async def open_prs(self, session: aiohttp.ClientSession, nwo: str) -> int:
        try:
            _, data = await self._get_json(
                session,
                "/search/issues",
                params={"q": f"state:open type:pr repo:{nwo}", "sort": "created", "order": "asc"},
            )
            return GitHubTranslator.search_total(data)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error searching for pr's for {nwo}: {e}")
            return -1

    async def commits_this_week(self, session: aiohttp.ClientSession, owner: str, repo: str) -> int:
        try:
            status, data = await self._get_json(session, f"/repos/{owner}/{repo}/stats/commit_activity")
            if status == 202:
                # GitHub is still computing the statistics.
                raise ProviderException("github", "commit activity not computed yet")
            return GitHubTranslator.last_week_total(data)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching commits this week for {owner}/{repo}: {e}")
            return -1

    async def commits_since_latest_release(
        self, session: aiohttp.ClientSession, owner: str, repo: str, branch: str = "master"
    ) -> Tuple[int, str]:
        """
        Returns (commit count between the latest release tag and branch, tag name).
        The tag is kept even when the comparison fails.
        """
        try:
            _, release = await self._get_json(session, f"/repos/{owner}/{repo}/releases/latest")
            tag = GitHubTranslator.tag_name(release)
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching latest release for {owner}/{repo}: {e}")
            return -1, ""

        try:
            _, comparison = await self._get_json(session, f"/repos/{owner}/{repo}/compare/{tag}...{branch}")
            return GitHubTranslator.total_commits(comparison), tag
        except LOOKUP_ERRORS as e:
            logger.warning(f"error fetching commit comparison for {tag}...{branch} for {owner}/{repo}: {e}")
            return -1, tag

    async def fetch_metrics(
        self, session: aiohttp.ClientSession, nwo: str, branch: str = "master"
    ) -> GitHubMetrics:
        """
        Collects all source-control metrics for a repository.

        The individual lookups run concurrently and fail independently.
        """
        if not nwo or nwo.count("/") != 1:
            return GitHubMetrics.unavailable()
        owner, repo = nwo.split("/")

        (commits, tag), issues_and_prs, prs, this_week = await asyncio.gather(
            self.commits_since_latest_release(session, owner, repo, branch),
            self.open_issues(session, owner, repo),
            self.open_prs(session, nwo),
            self.commits_this_week(session, owner, repo),
        )

        return GitHubMetrics(
            commits_this_week=this_week,
            open_prs=prs,
            open_issues=issues_and_prs - prs if issues_and_prs >= 0 and prs >= 0 else -1,
            commits_since_latest_release=commits,
            latest_release_tag=tag,
        )
