"""Rebuild a local output directory as an orphan commit on a remote branch.

The publish is a fixed sequence of stages::

    CLEAN_REF -> FETCH_META -> COLLECT_FILES -> UPLOAD_BLOBS
              -> CREATE_TREE -> CREATE_COMMIT -> CREATE_REF -> DONE

No stage is retried. The first error aborts the publish; blobs created before
the failure stay behind as unreferenced objects.
"""
import logging
from enum import Enum, auto

from .errors import FilesystemError
from .helpers import file_mode, hash_object, iter_output_files
from .objects import PublishResult, TreeEntry

logger = logging.getLogger(__name__)

DEFAULT_TARGET_BRANCH = "gh-pages"
DEFAULT_COMMIT_MESSAGE = "Automated commit by pages-publisher"


class PublishStage(Enum):
    CLEAN_REF = auto()
    FETCH_META = auto()
    COLLECT_FILES = auto()
    UPLOAD_BLOBS = auto()
    CREATE_TREE = auto()
    CREATE_COMMIT = auto()
    CREATE_REF = auto()
    DONE = auto()


def collect_entries(output_dir) -> list:
    """Return one blob TreeEntry per regular file under ``output_dir``."""
    try:
        return [
            TreeEntry(path=rel_path, type='blob', mode=file_mode(full_path), source=full_path)
            for rel_path, full_path in iter_output_files(output_dir)
        ]
    except OSError as exc:
        raise FilesystemError(f"Cannot walk output directory {output_dir}: {exc}") from exc


class TreePublisher:
    def __init__(self, client, message: str = DEFAULT_COMMIT_MESSAGE):
        self.client = client
        self.message = message
        self.stage = None

    def _enter(self, stage: PublishStage) -> None:
        logger.debug("Publish stage %s", stage.name)
        self.stage = stage

    def publish(self, output_dir, owner: str, repo: str, branch: str = DEFAULT_TARGET_BRANCH) -> PublishResult:
        ref = f"heads/{branch}"

        self._enter(PublishStage.CLEAN_REF)
        if branch in self.client.list_branches(owner, repo):
            logger.info("Deleting branch %s", branch)
            self.client.delete_ref(owner, repo, ref)

        self._enter(PublishStage.FETCH_META)
        repo_data = self.client.get_repo(owner, repo)
        repo_url = repo_data['url']
        logger.info("Publishing site to %s/%s", repo_data.get('name', repo), branch)

        self._enter(PublishStage.COLLECT_FILES)
        entries = collect_entries(output_dir)

        self._enter(PublishStage.UPLOAD_BLOBS)
        for entry in entries:
            self.upload_blob(repo_url, entry)

        self._enter(PublishStage.CREATE_TREE)
        logger.info("Creating tree with %d entries", len(entries))
        tree_sha = self.client.create_tree(repo_url, [entry.to_api() for entry in entries])
        logger.info("Created tree %s", tree_sha)

        self._enter(PublishStage.CREATE_COMMIT)
        commit_sha = self.client.create_commit(repo_url, tree_sha, self.message, parents=[])
        logger.info("Created commit %s", commit_sha)

        self._enter(PublishStage.CREATE_REF)
        self.client.create_ref(repo_url, ref, commit_sha)
        logger.info("Created ref refs/%s", ref)

        self._enter(PublishStage.DONE)
        return PublishResult(tree_sha=tree_sha, commit_sha=commit_sha, ref=f"refs/{ref}", blob_count=len(entries))

    def upload_blob(self, repo_url: str, entry: TreeEntry) -> str:
        try:
            data = entry.source.read_bytes()
        except OSError as exc:
            raise FilesystemError(f"Cannot read {entry.source}: {exc}") from exc
        sha = self.client.create_blob(repo_url, data)
        expected = hash_object(data, 'blob')
        if sha != expected:
            logger.warning("Blob sha for %s is %s, expected %s", entry.path, sha, expected)
        entry.sha = sha
        logger.info("Created blob for %s", entry.path)
        return sha
