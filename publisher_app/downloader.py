import logging

from .errors import FilesystemError
from .objects import TreeEntry, Workspace

logger = logging.getLogger(__name__)


def fetch_tree(client, owner: str, repo: str, branch: str, workspaces) -> Workspace:
    """Materialize ``branch`` of ``owner/repo`` into a freshly allocated workspace."""
    workspace = workspaces.allocate()
    download_into(client, owner, repo, branch, workspace, workspaces)
    return workspace


def download_into(client, owner: str, repo: str, branch: str, workspace: Workspace, workspaces) -> int:
    """Write every entry of the recursive tree listing into ``workspace``.

    Entries are handled strictly one after another. Any failure propagates and
    leaves a partially populated workspace that must not be reused. Returns the
    number of entries written.
    """
    logger.info("Getting source from %s/%s@%s", owner, repo, branch)
    listing = client.get_tree(owner, repo, branch)

    written = 0
    for item in listing:
        entry = TreeEntry.from_api(item)
        location = workspaces.resolve(workspace, entry.path)
        if entry.type == 'tree':
            _mkdir(location)
        elif entry.type == 'blob':
            content = client.get_blob(entry.url)
            _write(location, content)
        else:
            logger.warning("Skipping %s entry %s", entry.type, entry.path)
            continue
        written += 1

    logger.info("Downloaded %d entries into %s", written, workspace.path)
    return written


def _mkdir(path) -> None:
    try:
        path.mkdir(exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot create directory {path}: {exc}") from exc


def _write(path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc}") from exc
