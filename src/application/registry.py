import logging
from typing import List, Optional

import aiohttp

from src.domain.exceptions import ConfigurationException
from src.domain.models import Project, ReposConfig
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"


class ProjectRegistry:
    """
    Builds the list of tracked projects from the project list configuration.

    Explicit repos come first, followed by each organization's repositories
    in the order GitHub lists them. Nothing is de-duplicated.
    """

    def __init__(self, github_client: Optional[GitHubRestClient]):
        self.github_client = github_client

    @staticmethod
    def new_project(nwo: str) -> Project:
        pieces = nwo.split("/")
        if len(pieces) != 2 or not all(pieces):
            raise ConfigurationException(f"Expected 'owner/repo', got '{nwo}'.")
        repo = pieces[1]
        return Project(name=repo, nwo=nwo, branch=DEFAULT_BRANCH, gem_name=repo)

    async def load(self, config: ReposConfig, session: aiohttp.ClientSession) -> List[Project]:
        """
        Resolves the configuration into projects.

        Args:
            config: Parsed project list.
            session: HTTP session used for organization expansion.

        Returns:
            List[Project]: The projects, in registry order.

        Raises:
            ConfigurationException: If an explicit repo entry is not an 'owner/repo' string.
        """
        projects = [self.new_project(nwo) for nwo in config.repos]

        for org in config.orgs:
            if self.github_client is None:
                logger.warning(f"GitHub is disabled, skipping expansion of org {org}.")
                continue
            org_repos = await self.github_client.list_org_repos(session, org)
            logger.info(f"Org {org} expanded to {len(org_repos)} repos.")
            projects.extend(self.new_project(nwo) for nwo in org_repos)

        logger.info(f"Tracking {len(projects)} projects.")
        return projects
