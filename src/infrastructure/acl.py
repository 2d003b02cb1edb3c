from typing import Any, Dict, List
from src.domain.exceptions import ProviderException
from src.domain.models import RubyGem, TravisReport


def _mapping(provider: str, raw: Any, what: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ProviderException(provider, f"{what} is not an object")
    return raw


class GitHubTranslator:
    """
    Anti-corruption layer that pulls the handful of numbers we need out of raw GitHub REST responses.
    """

    @staticmethod
    def full_names(raw_repos: List[Dict[str, Any]]) -> List[str]:
        """
        Extracts 'owner/repo' names from an org repository listing, keeping the listing order.
        """
        if not isinstance(raw_repos, list):
            raise ProviderException("github", "repository listing is not a list")
        names = []
        for repo in raw_repos:
            if not isinstance(repo, dict):
                raise ProviderException("github", f"unexpected repository entry {repo!r}")
            if repo.get('full_name'):
                names.append(repo['full_name'])
        return names

    @staticmethod
    def open_issues_count(raw_repo: Dict[str, Any]) -> int:
        # GitHub counts open pull requests as issues here.
        count = _mapping("github", raw_repo, "repository").get('open_issues_count')
        if count is None:
            raise ProviderException("github", "repository has no open_issues_count")
        return int(count)

    @staticmethod
    def search_total(raw_search: Dict[str, Any]) -> int:
        total = _mapping("github", raw_search, "search result").get('total_count')
        if total is None:
            raise ProviderException("github", "search result has no total_count")
        return int(total)

    @staticmethod
    def last_week_total(raw_activity: List[Dict[str, Any]]) -> int:
        """
        Returns the commit total of the most recent week in a commit-activity series.
        """
        if not isinstance(raw_activity, list) or not raw_activity:
            raise ProviderException("github", "commit activity has no results")
        last_week = raw_activity[-1]
        if not isinstance(last_week, dict) or last_week.get('total') is None:
            raise ProviderException("github", "latest commit activity week has no total")
        return int(last_week['total'])

    @staticmethod
    def tag_name(raw_release: Dict[str, Any]) -> str:
        tag = _mapping("github", raw_release, "release").get('tag_name')
        if not tag:
            raise ProviderException("github", "release has no tag_name")
        return tag

    @staticmethod
    def total_commits(raw_comparison: Dict[str, Any]) -> int:
        total = _mapping("github", raw_comparison, "comparison").get('total_commits')
        if total is None:
            raise ProviderException("github", "comparison has no total_commits")
        return int(total)


class RubyGemsTranslator:
    """
    Translates a RubyGems.org gem document into a RubyGem.
    """

    @staticmethod
    def to_domain(raw_gem: Dict[str, Any]) -> RubyGem:
        if not isinstance(raw_gem, dict) or not raw_gem.get('name'):
            raise ProviderException("rubygems", "gem document has no name")
        return RubyGem(
            name=raw_gem['name'],
            version=raw_gem.get('version') or '',
            downloads=raw_gem.get('downloads', -1),
            version_downloads=raw_gem.get('version_downloads', -1),
            homepage_uri=raw_gem.get('homepage_uri') or '',
        )


class TravisTranslator:
    """
    Translates a Travis CI v3 branch resource into a TravisReport.
    """

    WEB_URL = "https://app.travis-ci.com"

    @classmethod
    def to_domain(cls, raw_branch: Dict[str, Any], nwo: str, branch: str) -> TravisReport:
        last_build = _mapping("travis", raw_branch, "branch").get('last_build')
        if not last_build:
            raise ProviderException("travis", f"no builds for {nwo}@{branch}")
        last_build = _mapping("travis", last_build, "last build")

        number = last_build.get('number')
        build_id = last_build.get('id')
        return TravisReport(
            nwo=nwo,
            branch=branch,
            state=last_build.get('state') or '',
            build_number=int(number) if number is not None else -1,
            finished_at=last_build.get('finished_at') or '',
            build_url=f"{cls.WEB_URL}/{nwo}/builds/{build_id}" if build_id is not None else '',
        )
