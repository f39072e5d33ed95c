"""Client for the GitHub git data API.

Every call carries the access token as the ``access_token`` query parameter and
a fixed ``User-Agent`` header. Calls are made one at a time; nothing in this
module dispatches requests concurrently.
"""
import base64
import logging

import requests

from .errors import ApiError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "pages-publisher"


class GitHubClient:
    def __init__(self, token: str = "", *, api_url: str = DEFAULT_API_URL,
                 user_agent: str = DEFAULT_USER_AGENT, timeout=None, session=None):
        self.token = token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers['User-Agent'] = user_agent
        self.session.headers.setdefault('Accept', 'application/vnd.github+json')

    @classmethod
    def from_settings(cls) -> "GitHubClient":
        from django.conf import settings

        return cls(
            settings.GITHUB_TOKEN,
            api_url=settings.GITHUB_API_URL,
            user_agent=settings.GITHUB_USER_AGENT,
            timeout=settings.GITHUB_TIMEOUT,
        )

    def close(self) -> None:
        self.session.close()

    def repo_url(self, owner: str, repo: str) -> str:
        return f"{self.api_url}/repos/{owner}/{repo}"

    def _request(self, method: str, url: str, expected: int, *, json=None, params=None):
        query = dict(params or {})
        if self.token:
            query['access_token'] = self.token
        try:
            resp = self.session.request(method, url, params=query, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            # str(exc) can echo the full URL, token included
            raise NetworkError(f"{method} {url} failed: {type(exc).__name__}") from exc
        if resp.status_code != expected:
            logger.error("GitHub answered %s %s with %s: %s", method, url, resp.status_code, resp.text)
            raise ApiError(resp.status_code, resp.text, method, url)
        return resp

    def list_branches(self, owner: str, repo: str) -> list:
        names = []
        url = f"{self.repo_url(owner, repo)}/branches"
        params = {'per_page': 100}
        while url:
            resp = self._request('GET', url, 200, params=params)
            names.extend(branch['name'] for branch in resp.json())
            url = resp.links.get('next', {}).get('url')
            # the next link already carries the page query
            params = None
        return names

    def delete_ref(self, owner: str, repo: str, ref: str) -> None:
        self._request('DELETE', f"{self.repo_url(owner, repo)}/git/refs/{ref}", 204)

    def get_repo(self, owner: str, repo: str) -> dict:
        return self._request('GET', self.repo_url(owner, repo), 200).json()

    def get_tree(self, owner: str, repo: str, branch: str) -> list:
        url = f"{self.repo_url(owner, repo)}/git/trees/{branch}"
        data = self._request('GET', url, 200, params={'recursive': 1}).json()
        if data.get('truncated'):
            logger.warning("Tree listing for %s/%s@%s is truncated", owner, repo, branch)
        return data['tree']

    def get_blob(self, url: str) -> bytes:
        data = self._request('GET', url, 200).json()
        # GitHub wraps base64 content at 60 columns
        return base64.b64decode(data['content'])

    def create_blob(self, repo_url: str, content: bytes) -> str:
        payload = {
            'content': base64.b64encode(content).decode('ascii'),
            'encoding': 'base64',
        }
        return self._request('POST', f"{repo_url}/git/blobs", 201, json=payload).json()['sha']

    def create_tree(self, repo_url: str, tree: list) -> str:
        return self._request('POST', f"{repo_url}/git/trees", 201, json={'tree': tree}).json()['sha']

    def create_commit(self, repo_url: str, tree_sha: str, message: str, parents=None) -> str:
        payload = {'message': message, 'tree': tree_sha, 'parents': list(parents or [])}
        return self._request('POST', f"{repo_url}/git/commits", 201, json=payload).json()['sha']

    def create_ref(self, repo_url: str, ref: str, sha: str) -> dict:
        payload = {'ref': f"refs/{ref}", 'sha': sha}
        return self._request('POST', f"{repo_url}/git/refs", 201, json=payload).json()
