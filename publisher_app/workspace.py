import logging
import shutil
import uuid
from pathlib import Path

from .errors import FilesystemError
from .objects import Workspace

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """Allocates one uniquely named scratch directory per pipeline run."""

    def __init__(self, root):
        self.root = Path(root)

    @classmethod
    def from_settings(cls) -> "WorkspaceManager":
        from django.conf import settings

        return cls(settings.PAGES_WORKSPACE_ROOT)

    def allocate(self) -> Workspace:
        workspace_id = uuid.uuid1().hex
        path = self.root / workspace_id
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            # exist_ok=False: a reused id must fail loudly
            path.mkdir()
        except OSError as exc:
            raise FilesystemError(f"Cannot create workspace {path}: {exc}") from exc
        logger.info("Allocated workspace %s", path)
        return Workspace(id=workspace_id, path=path)

    def release(self, workspace: Workspace) -> None:
        for path, label in ((workspace.path, "source"), (workspace.output_path, "output")):
            if not path.exists():
                continue
            logger.info("Cleaning %s directory %s", label, path)
            try:
                shutil.rmtree(path)
            except OSError as exc:
                raise FilesystemError(f"Cannot remove {path}: {exc}") from exc

    def resolve(self, workspace: Workspace, relative: str) -> Path:
        """Return the local path for a tree entry, refusing paths outside the workspace."""
        base = workspace.path.resolve()
        target = (base / relative).resolve()
        if target != base and base not in target.parents:
            raise FilesystemError(f"Tree entry {relative!r} escapes workspace {base}")
        return target
