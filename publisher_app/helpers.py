import hashlib
import os
import stat
from pathlib import Path

from .errors import PayloadError
from .objects import BLOB_MODE, EXECUTABLE_MODE, PushEvent


def hash_object(data: bytes, obj_type: str = "blob") -> str:
    """Return the git object id GitHub will assign to ``data``."""
    header = f"{obj_type} {len(data)}\0".encode()
    return hashlib.sha1(header + data).hexdigest()


def file_mode(path: Path) -> str:
    if os.stat(path).st_mode & stat.S_IXUSR:
        return EXECUTABLE_MODE
    return BLOB_MODE


def iter_output_files(root):
    """Yield ``(relative_posix_path, full_path)`` for every regular file under root, sorted."""
    root = os.path.abspath(root)

    def _raise(error):
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, root)
        if rel_dir == '.':
            rel_dir = ''
        for filename in sorted(filenames):
            full_path = os.path.join(dirpath, filename)
            if os.path.islink(full_path) or not os.path.isfile(full_path):
                continue
            rel_path = os.path.join(rel_dir, filename) if rel_dir else filename
            yield rel_path.replace(os.sep, '/'), Path(full_path)


def branch_from_ref(ref: str) -> str:
    # refs/heads/feature/x -> feature/x
    parts = ref.split('/', 2)
    if len(parts) == 3 and parts[0] == 'refs':
        return parts[2]
    return ref


def parse_push_payload(payload: dict) -> PushEvent:
    try:
        repository = payload["repository"]
        owner = repository["owner"]
        owner_name = owner.get("name") or owner.get("login")
        event = PushEvent(
            owner=owner_name,
            repo=repository["name"],
            branch=branch_from_ref(payload["ref"]),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise PayloadError(f"Malformed push payload: {exc}") from exc
    if not event.owner or not event.repo:
        raise PayloadError("Push payload is missing the repository owner or name")
    return event
