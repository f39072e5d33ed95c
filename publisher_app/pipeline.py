"""Download -> Build -> Publish -> Cleanup for one push event."""
import logging
import threading
from enum import Enum, auto

from .builder import CommandBuilder
from .downloader import download_into
from .errors import PipelineError
from .github import GitHubClient
from .objects import PipelineResult, PushEvent
from .publisher import DEFAULT_TARGET_BRANCH, TreePublisher
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    DOWNLOAD = auto()
    BUILD = auto()
    PUBLISH = auto()
    CLEANUP = auto()
    DONE = auto()


class BranchLocks:
    """One lock per (owner, repo, branch) so publishes to the same ref never interleave.

    Locks are never evicted; the registry holds one entry per distinct target
    branch this process has published to.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def get(self, owner: str, repo: str, branch: str) -> threading.Lock:
        key = (owner.lower(), repo.lower(), branch)
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


branch_locks = BranchLocks()


class PagesPipeline:
    def __init__(self, client, workspaces, builder, publisher=None, *,
                 target_branch: str = DEFAULT_TARGET_BRANCH,
                 cleanup_on_failure: bool = False, locks=None):
        self.client = client
        self.workspaces = workspaces
        self.builder = builder
        self.publisher = publisher or TreePublisher(client)
        self.target_branch = target_branch
        self.cleanup_on_failure = cleanup_on_failure
        # None disables per-branch serialization
        self.locks = locks

    @classmethod
    def from_settings(cls) -> "PagesPipeline":
        from django.conf import settings

        client = GitHubClient.from_settings()
        return cls(
            client,
            WorkspaceManager.from_settings(),
            CommandBuilder.from_settings(),
            TreePublisher(client, settings.PAGES_COMMIT_MESSAGE),
            target_branch=settings.PAGES_TARGET_BRANCH,
            cleanup_on_failure=settings.PAGES_CLEANUP_ON_FAILURE,
            locks=branch_locks if settings.PAGES_SERIALIZE_PUBLISHES else None,
        )

    def run(self, event: PushEvent) -> PipelineResult:
        result = PipelineResult(event=event, ok=False, stage=PipelineStage.DOWNLOAD.name)
        try:
            result.workspace = self.workspaces.allocate()
            download_into(self.client, event.owner, event.repo, event.branch, result.workspace, self.workspaces)

            result.stage = PipelineStage.BUILD.name
            output = self.builder(result.workspace.path)

            result.stage = PipelineStage.PUBLISH.name
            result.publish = self._publish(output, event)

            result.stage = PipelineStage.CLEANUP.name
            self.workspaces.release(result.workspace)
        except PipelineError as exc:
            logger.exception("Pipeline for %s/%s@%s failed during %s",
                             event.owner, event.repo, event.branch, result.stage)
            result.error = exc
            self._cleanup_after_failure(result)
            return result

        result.stage = PipelineStage.DONE.name
        result.ok = True
        logger.info("Published %s/%s@%s to %s", event.owner, event.repo, event.branch, self.target_branch)
        return result

    def close(self) -> None:
        self.client.close()

    def _publish(self, output, event: PushEvent):
        if self.locks is None:
            return self.publisher.publish(output, event.owner, event.repo, self.target_branch)
        with self.locks.get(event.owner, event.repo, self.target_branch):
            return self.publisher.publish(output, event.owner, event.repo, self.target_branch)

    def _cleanup_after_failure(self, result: PipelineResult) -> None:
        if result.workspace is None:
            return
        if not self.cleanup_on_failure:
            logger.warning("Leaving workspace %s on disk", result.workspace.path)
            return
        try:
            self.workspaces.release(result.workspace)
        except PipelineError:
            logger.exception("Could not release workspace %s", result.workspace.path)
