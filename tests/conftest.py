import base64
import hashlib
import json

import pytest

from publisher_app.errors import ApiError
from publisher_app.helpers import hash_object
from publisher_app.workspace import WorkspaceManager

REPO_URL = "https://api.github.test/repos/acme/site"


class FakeGitHub:
    """In-memory stand-in for GitHubClient that records every call in order."""

    def __init__(self, files=None, branches=("main",)):
        self.calls = []
        self.branches = list(branches)
        self.remote_files = dict(files or {})
        self.trees = {}
        self.commits = []
        self.refs = {}
        self.fail = {}
        self.closed = False

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            status = self.fail[name]
            if callable(status):
                status = status(*args)
            if status:
                raise ApiError(status, '{"message": "boom"}', name, REPO_URL)

    def names(self):
        return [call[0] for call in self.calls]

    def listing(self):
        dirs = set()
        for path in self.remote_files:
            parts = path.split('/')[:-1]
            for i in range(1, len(parts) + 1):
                dirs.add('/'.join(parts[:i]))
        entries = [{"path": d, "type": "tree", "mode": "040000"} for d in dirs]
        entries += [
            {"path": p, "type": "blob", "mode": "100644", "url": f"{REPO_URL}/git/blobs/{p}"}
            for p in self.remote_files
        ]
        return sorted(entries, key=lambda e: e["path"])

    def list_branches(self, owner, repo):
        self._record('list_branches', owner, repo)
        return list(self.branches)

    def delete_ref(self, owner, repo, ref):
        self._record('delete_ref', owner, repo, ref)
        self.branches.remove(ref.split('/', 1)[1])
        self.refs.pop(ref, None)

    def get_repo(self, owner, repo):
        self._record('get_repo', owner, repo)
        return {"name": repo, "url": REPO_URL}

    def get_tree(self, owner, repo, branch):
        self._record('get_tree', owner, repo, branch)
        return self.listing()

    def get_blob(self, url):
        self._record('get_blob', url)
        path = url.split('/git/blobs/', 1)[1]
        return base64.b64decode(base64.b64encode(self.remote_files[path]))

    def create_blob(self, repo_url, content):
        self._record('create_blob', repo_url, content)
        return hash_object(content, 'blob')

    def create_tree(self, repo_url, tree):
        self._record('create_tree', repo_url, tree)
        body = json.dumps(tree, sort_keys=True).encode()
        sha = hash_object(body, 'tree')
        self.trees[sha] = tree
        return sha

    def create_commit(self, repo_url, tree_sha, message, parents=None):
        self._record('create_commit', repo_url, tree_sha, message, list(parents or []))
        sha = hashlib.sha1(f"{tree_sha}{len(self.commits)}".encode()).hexdigest()
        self.commits.append({"sha": sha, "tree": tree_sha, "parents": list(parents or [])})
        return sha

    def create_ref(self, repo_url, ref, sha):
        self._record('create_ref', repo_url, ref, sha)
        self.refs[ref] = sha
        self.branches.append(ref.split('/', 1)[1])
        return {"ref": f"refs/{ref}", "object": {"sha": sha}}

    def close(self):
        self.closed = True


@pytest.fixture
def fake_github():
    return FakeGitHub(files={
        "index.md": b"# Hello\n",
        "css/site.css": b"body { margin: 0 }\n",
        "img/logo.png": bytes(range(256)),
    })


@pytest.fixture
def workspaces(tmp_path):
    return WorkspaceManager(tmp_path / "scratch")


@pytest.fixture
def output_dir(tmp_path):
    root = tmp_path / "site-OUTPUT"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Hello</h1>\n")
    (root / "css" / "site.css").write_text("body { margin: 0 }\n")
    (root / "feed.xml").write_bytes(b"<rss/>")
    return root


class CopyBuilder:
    """Writes every source file unchanged into the output directory."""

    def __init__(self):
        self.sources = []

    def __call__(self, source):
        self.sources.append(source)
        output = source.with_name(source.name + "-OUTPUT")
        for path in source.rglob("*"):
            if path.is_file():
                target = output / path.relative_to(source)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(path.read_bytes())
        output.mkdir(exist_ok=True)
        return output


@pytest.fixture
def copy_builder():
    return CopyBuilder()
