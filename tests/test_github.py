import base64
import logging
from unittest.mock import Mock

import pytest
import requests

from publisher_app.errors import ApiError, NetworkError
from publisher_app.github import GitHubClient


def _response(status, payload=None, links=None, text=""):
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.links = links or {}
    resp.text = text
    return resp


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return GitHubClient("secret", api_url="https://api.github.test/", user_agent="pages-test", session=session)


def test_every_call_carries_token_and_user_agent(client, session):
    session.request.return_value = _response(200, {"name": "site", "url": "https://api.github.test/repos/acme/site"})
    data = client.get_repo("acme", "site")
    assert data["name"] == "site"
    assert session.headers["User-Agent"] == "pages-test"
    method, url = session.request.call_args.args
    assert (method, url) == ("GET", "https://api.github.test/repos/acme/site")
    assert session.request.call_args.kwargs["params"] == {"access_token": "secret"}


def test_list_branches_follows_pagination(client, session):
    session.request.side_effect = [
        _response(200, [{"name": "main"}], links={"next": {"url": "https://api.github.test/page2"}}),
        _response(200, [{"name": "gh-pages"}]),
    ]
    assert client.list_branches("acme", "site") == ["main", "gh-pages"]
    first, second = session.request.call_args_list
    assert first.kwargs["params"] == {"per_page": 100, "access_token": "secret"}
    assert second.args[1] == "https://api.github.test/page2"


def test_get_tree_is_recursive(client, session):
    session.request.return_value = _response(200, {"tree": [{"path": "a", "type": "blob"}], "truncated": False})
    assert client.get_tree("acme", "site", "main") == [{"path": "a", "type": "blob"}]
    assert session.request.call_args.args[1].endswith("/repos/acme/site/git/trees/main")
    assert session.request.call_args.kwargs["params"]["recursive"] == 1


def test_get_blob_decodes_wrapped_base64(client, session):
    encoded = base64.b64encode(b"x" * 100).decode()
    wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
    session.request.return_value = _response(200, {"content": wrapped, "encoding": "base64"})
    assert client.get_blob("https://api.github.test/blob/1") == b"x" * 100


def test_create_blob_posts_base64(client, session):
    session.request.return_value = _response(201, {"sha": "abc"})
    assert client.create_blob("https://api.github.test/repos/acme/site", b"hi") == "abc"
    assert session.request.call_args.kwargs["json"] == {"content": "aGk=", "encoding": "base64"}


def test_create_commit_and_ref_payloads(client, session):
    session.request.return_value = _response(201, {"sha": "c0ffee"})
    repo_url = "https://api.github.test/repos/acme/site"
    assert client.create_commit(repo_url, "tree1", "msg", parents=[]) == "c0ffee"
    assert session.request.call_args.kwargs["json"] == {"message": "msg", "tree": "tree1", "parents": []}
    client.create_ref(repo_url, "heads/gh-pages", "c0ffee")
    assert session.request.call_args.args[1] == f"{repo_url}/git/refs"
    assert session.request.call_args.kwargs["json"] == {"ref": "refs/heads/gh-pages", "sha": "c0ffee"}


def test_delete_ref_expects_no_content(client, session):
    session.request.return_value = _response(204)
    client.delete_ref("acme", "site", "heads/gh-pages")
    assert session.request.call_args.args == ("DELETE", "https://api.github.test/repos/acme/site/git/refs/heads/gh-pages")


def test_unexpected_status_raises_api_error(client, session):
    session.request.return_value = _response(422, text='{"message": "Invalid"}')
    with pytest.raises(ApiError) as excinfo:
        client.create_tree("https://api.github.test/repos/acme/site", [])
    assert excinfo.value.status == 422
    assert excinfo.value.body == '{"message": "Invalid"}'


def test_transport_failure_raises_network_error(client, session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(NetworkError):
        client.get_repo("acme", "site")


def test_no_token_means_no_query_parameter(session):
    client = GitHubClient("", session=session)
    session.request.return_value = _response(200, {})
    client.get_repo("acme", "site")
    assert session.request.call_args.kwargs["params"] == {}


def test_truncated_tree_listing_is_logged(client, session, caplog):
    session.request.return_value = _response(200, {"tree": [], "truncated": True})
    with caplog.at_level(logging.WARNING, logger="publisher_app.github"):
        assert client.get_tree("acme", "site", "main") == []
    assert "Tree listing for acme/site@main is truncated" in caplog.text


def test_close_closes_session(client, session):
    client.close()
    session.close.assert_called_once_with()
