import pytest

from oss_crawler.config import CrawlerConfig
from oss_crawler.exceptions import ResponseDecodeError
from oss_crawler.github import MEDIA_TYPE_DEFAULT, MEDIA_TYPE_STAR, PER_PAGE, GitHubClient


@pytest.fixture
def github(session, clock):
    return GitHubClient(session=session)


def sent_requests(send):
    return [c.args[0] for c in send.call_args_list]


def test_stargazers_pagination_stops_at_empty_page(github, session, mocker, make_response):
    page1 = [{"starred_at": f"2024-01-01T00:00:{i % 60:02d}Z", "user": {"id": i}} for i in range(100)]
    page2 = [{"starred_at": "2024-02-01T00:00:00Z", "user": {"id": 100 + i}} for i in range(37)]
    send = mocker.patch.object(session, "send", side_effect=[
        make_response(200, page1),
        make_response(200, page2),
        make_response(200, []),
    ])

    stargazers = list(github.iter_stargazers("octocat/Hello-World"))

    assert len(stargazers) == 137
    assert [s["user"]["id"] for s in stargazers] == list(range(137))
    urls = [r.url for r in sent_requests(send)]
    assert urls == [
        f"https://api.github.com/repos/octocat/Hello-World/stargazers?per_page={PER_PAGE}&page={n}"
        for n in (1, 2, 3)
    ]
    assert all(r.headers["Accept"] == MEDIA_TYPE_STAR for r in sent_requests(send))


def test_stargazers_page_must_be_a_list(github, session, mocker, make_response):
    mocker.patch.object(session, "send", return_value=make_response(200, {"message": "hi"}))

    with pytest.raises(ResponseDecodeError):
        github.repos_stargazers("octocat/Hello-World", 1)


@pytest.mark.parametrize("method,key,path", [
    ("repo", "octocat/Hello-World", "/repos/octocat/Hello-World"),
    ("repo_by_id", 1296269, "/repositories/1296269"),
    ("readme", "octocat/Hello-World", "/repos/octocat/Hello-World/readme"),
    ("readme_by_id", 1296269, "/repositories/1296269/readme"),
    ("user", "octocat", "/users/octocat"),
    ("user_by_id", 583231, "/user/583231"),
])
def test_point_lookups(github, session, mocker, make_response, method, key, path):
    body = {"id": 1, "name": "Hello-World", "nested": {"topics": ["a", "b"]}}
    send = mocker.patch.object(session, "send", return_value=make_response(200, body))

    value = getattr(github, method)(key)

    assert value == body
    (request,) = sent_requests(send)
    assert request.method == "GET"
    assert request.url == f"https://api.github.com{path}"
    assert request.headers["Accept"] == MEDIA_TYPE_DEFAULT
    assert request.headers["User-Agent"].startswith("oss-crawler/")


def test_token_sent_as_bearer(session, clock, mocker, make_response):
    github = GitHubClient(token="ghp_secret", session=session)
    send = mocker.patch.object(session, "send", return_value=make_response(200, {}))

    github.user("octocat")

    assert sent_requests(send)[0].headers["Authorization"] == "Bearer ghp_secret"


def test_token_from_config(session, clock, mocker, make_response):
    github = GitHubClient(config=CrawlerConfig(github_token="from-config"), session=session)
    send = mocker.patch.object(session, "send", return_value=make_response(200, {}))

    github.repo("octocat/Hello-World")

    assert sent_requests(send)[0].headers["Authorization"] == "Bearer from-config"


def test_no_token_no_authorization_header(github, session, mocker, make_response):
    send = mocker.patch.object(session, "send", return_value=make_response(200, {}))

    github.user("octocat")

    assert "Authorization" not in sent_requests(send)[0].headers


def test_decode_error_is_not_retried(github, session, mocker, make_response):
    send = mocker.patch.object(session, "send", return_value=make_response(200, b"<html>oops</html>"))

    with pytest.raises(ResponseDecodeError) as excinfo:
        github.repo("octocat/Hello-World")

    assert send.call_count == 1
    assert "repos/octocat/Hello-World" in str(excinfo.value)


def test_backoff_state_shared_across_calls(github, session, mocker, make_response, clock):
    mocker.patch.object(session, "send", side_effect=[
        make_response(503),
        make_response(200, {"login": "octocat"}),
        make_response(503),
        make_response(200, {"id": 1296269}),
    ])

    github.user("octocat")
    github.repo_by_id(1296269)

    # The second call continues from the first call's grown delay
    assert clock.sleeps() == [60, 120]
    assert github.timer.delay == 240


def test_backoff_bounds_from_config(session, clock, mocker, make_response):
    github = GitHubClient(config=CrawlerConfig(min_delay=1, max_delay=4), session=session)
    mocker.patch.object(session, "send", side_effect=[make_response(500)] * 4 + [make_response(200, {})])

    github.user("octocat")

    assert clock.sleeps() == [1, 2, 4, 4]
