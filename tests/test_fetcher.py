from unittest import mock

import pytest
import requests

from hostlist_aggregator import USER_AGENT, ContentFetcher, FetchError


def make_response(content=b"", status_error=None):
    response = mock.Mock()
    response.content = content
    response.raise_for_status.side_effect = status_error
    return response


def test_fetch_success():
    fetcher = ContentFetcher(timeout=5)
    with mock.patch.object(fetcher.session, "get", return_value=make_response(b"a.com\nb.com\n")) as get:
        result = fetcher.fetch("https://example.org/list")
    assert result.ok
    assert result.body == "a.com\nb.com\n"
    get.assert_called_once_with("https://example.org/list", timeout=5)


def test_fetch_ignores_undecodable_bytes():
    fetcher = ContentFetcher()
    with mock.patch.object(fetcher.session, "get", return_value=make_response(b"a.com\xff\n")):
        assert fetcher.fetch("https://example.org/list").body == "a.com\n"


def test_fetch_network_error_is_isolated():
    fetcher = ContentFetcher()
    with mock.patch.object(fetcher.session, "get", side_effect=requests.ConnectionError("boom")):
        result = fetcher.fetch("https://example.org/list")
    assert not result.ok
    assert "boom" in result.error
    assert result.body.startswith("#")


def test_fetch_http_error_is_isolated():
    fetcher = ContentFetcher()
    error = requests.HTTPError("404 Client Error")
    with mock.patch.object(fetcher.session, "get", return_value=make_response(status_error=error)):
        result = fetcher.fetch("https://example.org/missing")
    assert not result.ok
    assert "404" in result.error


def test_fetch_or_raise():
    fetcher = ContentFetcher()
    with mock.patch.object(fetcher.session, "get", side_effect=requests.Timeout("timed out")):
        with pytest.raises(FetchError) as excinfo:
            fetcher.fetch_or_raise("https://example.org/csv.txt")
    assert excinfo.value.url == "https://example.org/csv.txt"
    assert "timed out" in str(excinfo.value)


def test_session_setup():
    with ContentFetcher(retries=2) as fetcher:
        assert fetcher.session.headers["User-Agent"] == USER_AGENT
        adapter = fetcher.session.get_adapter("https://example.org")
        assert adapter.max_retries.total == 2
