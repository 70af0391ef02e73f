import pytest

from conftest import FakeHTTP, FakeResponse
from wpscaffold.github_client import RETRY_DELAYS, GitHubClient, GitHubError, RepoInfo, retry_delay

REPO_PAYLOAD = {
    "name": "my-plugin",
    "owner": {"login": "wearerequired"},
    "html_url": "https://github.com/wearerequired/my-plugin",
    "clone_url": "https://github.com/wearerequired/my-plugin.git",
    "ssh_url": "git@github.com:wearerequired/my-plugin.git",
    "default_branch": "main",
}
COMMITS = "/repos/wearerequired/my-plugin/commits"


def _client(http: FakeHTTP) -> GitHubClient:
    return GitHubClient("t0ken", http=http)


def test_retry_delays_follow_schedule_and_cap_at_five() -> None:
    assert [retry_delay(i) for i in range(10)] == [0.5, 1, 1, 2, 3, 4, 5, 5, 5, 5]
    assert max(RETRY_DELAYS) == 5


@pytest.mark.parametrize("not_ready", [0, 1, 3, 9])
def test_wait_until_ready_queries_n_plus_one_times(not_ready: int) -> None:
    transient = [FakeResponse(404, {"message": "Not Found"}), FakeResponse(409, {"message": "Git Repository is empty."}), FakeResponse(200, [])]
    responses = [transient[i % 3] for i in range(not_ready)] + [FakeResponse(200, [{"sha": "abc"}])]
    http = FakeHTTP({("GET", COMMITS): responses})
    sleeps: list[float] = []

    assert _client(http).wait_until_ready("wearerequired", "my-plugin", sleep=sleeps.append)

    assert http.paths("GET").count(COMMITS) == not_ready + 1
    assert sleeps == [retry_delay(i) for i in range(not_ready)]
    assert all(s <= 5 for s in sleeps)


def test_wait_until_ready_propagates_other_errors_immediately() -> None:
    http = FakeHTTP({("GET", COMMITS): [FakeResponse(500, {"message": "boom"})]})
    sleeps: list[float] = []

    with pytest.raises(GitHubError) as exc:
        _client(http).wait_until_ready("wearerequired", "my-plugin", sleep=sleeps.append)
    assert exc.value.status_code == 500
    assert sleeps == []


def test_wait_until_ready_gives_up_after_max_attempts() -> None:
    http = FakeHTTP({("GET", COMMITS): [FakeResponse(409, {"message": "empty"})]})
    sleeps: list[float] = []

    with pytest.raises(GitHubError, match="not ready after 3 attempts"):
        _client(http).wait_until_ready("wearerequired", "my-plugin", sleep=sleeps.append, max_attempts=3)
    assert len(http.calls) == 3
    assert sleeps == [0.5, 1]


def test_create_from_template_returns_handle_not_ready() -> None:
    http = FakeHTTP({("POST", "/repos/wearerequired/wordpress-plugin-boilerplate/generate"): [FakeResponse(201, REPO_PAYLOAD)]})

    repo = _client(http).create_repo_from_template(
        template="wearerequired/wordpress-plugin-boilerplate",
        owner="wearerequired",
        name="my-plugin",
        private=True,
        description="Does things.",
    )

    assert repo.full_name == "wearerequired/my-plugin"
    assert repo.ready is False
    body = http.calls[0]["json"]
    assert body["owner"] == "wearerequired"
    assert body["private"] is True
    assert body["description"] == "Does things."


def test_mark_ready_flips_flag() -> None:
    http = FakeHTTP({("GET", COMMITS): [FakeResponse(200, [{"sha": "abc"}])]})
    repo = RepoInfo("wearerequired", "my-plugin", "", "", "", "main")

    _client(http).mark_ready(repo, sleep=lambda s: None)
    assert repo.ready is True


def test_has_repository() -> None:
    http = FakeHTTP({("GET", "/repos/wearerequired/my-plugin"): [FakeResponse(200, REPO_PAYLOAD)]})
    client = _client(http)
    assert client.has_repository("wearerequired", "my-plugin")
    assert not client.has_repository("wearerequired", "missing")


def test_auth_header_and_error_message() -> None:
    http = FakeHTTP({("GET", "/repos/a/b"): [FakeResponse(403, {"message": "Bad credentials"})]})
    with pytest.raises(GitHubError, match="Bad credentials"):
        _client(http).get_repo("a", "b")
    assert http.calls[0]["headers"]["Authorization"] == "Bearer t0ken"


def test_empty_token_rejected() -> None:
    with pytest.raises(GitHubError):
        GitHubClient("  ", http=FakeHTTP())


def test_replace_topics() -> None:
    http = FakeHTTP({("PUT", "/repos/wearerequired/my-plugin/topics"): [FakeResponse(200, {"names": ["wordpress-plugin"]})]})
    assert _client(http).replace_topics("wearerequired", "my-plugin", ["wordpress-plugin"]) == ["wordpress-plugin"]
    assert http.calls[0]["json"] == {"names": ["wordpress-plugin"]}


def test_search_pull_requests_prefixes_query_and_parses_repo() -> None:
    items = [
        {"repository_url": "https://api.github.com/repos/wearerequired/foo", "number": 7, "title": "Bump x"},
        {"repository_url": "https://api.github.com/repos/wearerequired/bar", "number": 12, "title": "Bump y"},
    ]
    http = FakeHTTP({("GET", "/search/issues"): [FakeResponse(200, {"items": items})]})

    prs = _client(http).search_pull_requests("user:wearerequired author:app/dependabot")

    assert http.calls[0]["params"] == {"q": "is:pr user:wearerequired author:app/dependabot"}
    assert [str(pr) for pr in prs] == ["wearerequired/foo#7", "wearerequired/bar#12"]
    assert prs[0].url == "https://github.com/wearerequired/foo/pull/7"


def test_search_repositories_sorted() -> None:
    items = [{"name": "zeta"}, {"name": "alpha"}, {"name": "mid"}]
    http = FakeHTTP({("GET", "/search/repositories"): [FakeResponse(200, {"items": items})]})
    assert _client(http).search_repositories("org:wearerequired") == ["alpha", "mid", "zeta"]


def test_get_file_missing_is_none_and_content_is_unwrapped() -> None:
    path = "/repos/wearerequired/foo/contents/.github/workflows/ci.yml"
    http = FakeHTTP({("GET", path): [FakeResponse(200, {"sha": "s1", "content": "YWJj\nZGVm\n"})]})
    client = _client(http)

    existing = client.get_file("wearerequired", "foo", ".github/workflows/ci.yml", ref="master")
    assert existing is not None
    assert existing.sha == "s1"
    assert existing.content == "YWJjZGVm"
    assert client.get_file("wearerequired", "bar", ".github/workflows/ci.yml", ref="master") is None


def test_put_file_sends_sha_only_when_updating() -> None:
    path = "/repos/wearerequired/foo/contents/README.md"
    http = FakeHTTP({("PUT", path): [FakeResponse(200, {"commit": {"html_url": "https://github.com/c/1"}})]})
    client = _client(http)

    url = client.put_file("wearerequired", "foo", "README.md", content="YQ==", message="Update.", branch="master")
    client.put_file("wearerequired", "foo", "README.md", content="YQ==", message="Update.", branch="master", sha="s1")

    assert url == "https://github.com/c/1"
    assert "sha" not in http.calls[0]["json"]
    assert http.calls[1]["json"]["sha"] == "s1"
