"""Data models for contrib-stats."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class Repository:
    name: str
    url: str
    full_name: str

    @classmethod
    def from_full_name(cls, full_name: str, host: str | None = None) -> Repository:
        """Build a Repository from an ``org/name`` string."""
        org, sep, name = full_name.partition("/")
        if not sep or not org or not name or "/" in name:
            raise ValueError(f"Expected ORG/NAME, got {full_name!r}")
        url = f"{host.rstrip('/')}/{full_name}" if host else full_name
        return cls(name=name, url=url, full_name=full_name)


@dataclass(frozen=True)
class LightweightCommit:
    sha: str
    author_email: str
    date: str
    identity: str


@dataclass(frozen=True)
class FileChange:
    name: str
    additions: int
    deletions: int
    status: str


@dataclass(frozen=True)
class DetailedCommit(LightweightCommit):
    files: tuple[FileChange, ...] = ()


@dataclass
class AuthorStatistics:
    """Contribution totals for one author email."""

    id: str
    num_commits: int = 0
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class WeeklyActivity:
    additions: int
    deletions: int
    commits: int
    week_start_unix: int
    week_start_human: str


@dataclass
class ContributorStatistics:
    id: str
    num_commits: int
    history: list[WeeklyActivity] = field(default_factory=list)


@dataclass
class Issue:
    title: str
    body: str = ""
    assignees: list[str] | None = None
    milestone: int | None = None
    labels: list[str] | None = None

    def to_payload(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class IssueResult:
    ok: bool
    error: str | None = None


@dataclass
class RepoAuthors:
    name: str
    full_name: str
    authors: list[AuthorStatistics] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return sum(a.num_commits for a in self.authors)


@dataclass
class AuthorsReport:
    org: str
    period_start: str | None
    period_end: str | None
    file_match: str | None
    total_repos: int
    total_commits: int
    total_additions: int
    total_deletions: int
    authors: list[AuthorStatistics] = field(default_factory=list)
    repos: list[RepoAuthors] = field(default_factory=list)
    failed_repos: list[str] = field(default_factory=list)
