from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

class Project(BaseModel):
    """
    Immutable identity of a tracked project.
    Built once by the registry and never changed afterwards.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Short name, the repository name")
    nwo: str = Field(..., description="Name with owner, e.g. 'acme/widget'")
    branch: str = Field("master", description="Branch used for CI and release comparisons")
    gem_name: str = Field(..., description="Package name on RubyGems.org")


class GitHubMetrics(BaseModel):
    """Source-control activity. Counts are -1 and the tag is '' when a lookup failed."""
    commits_this_week: int = -1
    open_prs: int = -1
    open_issues: int = -1
    commits_since_latest_release: int = -1
    latest_release_tag: str = ""

    @classmethod
    def unavailable(cls) -> "GitHubMetrics":
        return cls()


class RubyGem(BaseModel):
    """Latest release information for a gem."""
    name: str = ""
    version: str = ""
    downloads: int = -1
    version_downloads: int = -1
    homepage_uri: str = ""

    @classmethod
    def unavailable(cls, name: str = "") -> "RubyGem":
        return cls(name=name)


class TravisReport(BaseModel):
    """Status of the last CI build on a branch."""
    nwo: str = ""
    branch: str = ""
    state: str = ""
    build_number: int = -1
    finished_at: str = ""
    build_url: str = ""

    @classmethod
    def unavailable(cls, nwo: str = "", branch: str = "") -> "TravisReport":
        return cls(nwo=nwo, branch=branch)


class MetricsRecord(BaseModel):
    """
    Mutable per-project cache slot.

    A slot is None until filled; a filled slot may hold a sentinel model.
    fetched is only ever set once all three slots are filled.
    """
    model_config = ConfigDict(validate_assignment=True)

    gem: Optional[RubyGem] = None
    travis: Optional[TravisReport] = None
    github: Optional[GitHubMetrics] = None
    fetched: bool = False

    def is_complete(self) -> bool:
        return self.gem is not None and self.travis is not None and self.github is not None

    def clear(self) -> None:
        self.fetched = False
        self.gem = None
        self.travis = None
        self.github = None


class ReposConfig(BaseModel):
    """Contents of the repos.yml project list."""
    model_config = ConfigDict(extra="ignore")

    orgs: List[str] = Field(default_factory=list)
    repos: List[str] = Field(default_factory=list)
    # Parsed for compatibility with existing files; not applied anywhere.
    exclude_repos: List[str] = Field(default_factory=list)


def to_output_record(project: Project, record: MetricsRecord) -> Dict[str, Any]:
    """JSON-serialisable view of a project and its cached metrics."""
    return {
        "name": project.name,
        "nwo": project.nwo,
        "branch": project.branch,
        "gem_name": project.gem_name,
        "gem": record.gem.model_dump() if record.gem is not None else None,
        "travis": record.travis.model_dump() if record.travis is not None else None,
        "github": record.github.model_dump() if record.github is not None else None,
    }
