from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

BLOB_MODE = "100644"
EXECUTABLE_MODE = "100755"
OUTPUT_SUFFIX = "-OUTPUT"


@dataclass
class TreeEntry:
    """One path in a tree snapshot.

    Entries read from a remote listing carry ``url``; entries collected from a
    local output directory carry ``source`` and get ``sha`` once uploaded.
    """

    path: str
    type: str = "blob"
    mode: str = BLOB_MODE
    sha: Optional[str] = None
    url: Optional[str] = None
    source: Optional[Path] = None

    @classmethod
    def from_api(cls, data: dict) -> "TreeEntry":
        return cls(
            path=data["path"],
            type=data["type"],
            mode=data.get("mode", BLOB_MODE),
            sha=data.get("sha"),
            url=data.get("url"),
        )

    def to_api(self) -> dict:
        if self.sha is None:
            raise ValueError(f"Tree entry {self.path} has no blob sha")
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}


@dataclass(frozen=True)
class Workspace:
    """Scratch directory for one pipeline run."""

    id: str
    path: Path

    @property
    def output_path(self) -> Path:
        return self.path.with_name(self.path.name + OUTPUT_SUFFIX)


@dataclass(frozen=True)
class PushEvent:
    owner: str
    repo: str
    branch: str


@dataclass(frozen=True)
class PublishResult:
    tree_sha: str
    commit_sha: str
    ref: str
    blob_count: int


@dataclass
class PipelineResult:
    event: PushEvent
    ok: bool
    stage: str
    workspace: Optional[Workspace] = None
    publish: Optional[PublishResult] = None
    error: Optional[Exception] = field(default=None, repr=False)
