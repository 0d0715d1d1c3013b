import types

import pytest

from hostlist_aggregator import extract_hostname_from_line, normalize, validate_domain


@pytest.mark.parametrize("line,expected", [
    ("0.0.0.0 bad.com # tracker", "bad.com"),
    ("  127.0.0.1\tbad2.com", "bad2.com"),
    ("::1 bad3.com", None),
    ("# comment only", None),
    ("", None),
    ("   \t  ", None),
    ("plain.example.com", "plain.example.com"),
    ("Mixed.Case.COM.", "mixed.case.com"),
    ("0.0.0.0", None),
    ("0.0.0.0 0.0.0.0", None),
    ("127.0.0.1 localhost", None),
    ("255.255.255.255 broadcasthost", None),
    ("0.0.0.0   # only a comment after the prefix", None),
    ("ads.example.com#inline", "ads.example.com"),
])
def test_extract_hostname_from_line(line, expected):
    assert extract_hostname_from_line(line) == expected


def test_extract_is_stable_on_canonical_entries():
    for line in ["0.0.0.0 bad.com # tracker", "  127.0.0.1\tbad2.com", "Tracker.Example.NET"]:
        once = extract_hostname_from_line(line)
        assert extract_hostname_from_line(once) == once


def test_normalize_body():
    body = "\n".join([
        "# Title: test list",
        "",
        "0.0.0.0 one.com",
        "127.0.0.1 two.com # inline",
        ":: three.com",
        "four.com",
    ])
    assert list(normalize(body)) == ["one.com", "two.com", "four.com"]


def test_normalize_handles_crlf():
    assert list(normalize("a.com\r\nb.com\r\n")) == ["a.com", "b.com"]


def test_normalize_is_lazy():
    assert isinstance(normalize("a.com"), types.GeneratorType)


def test_failed_fetch_sentinel_is_dropped():
    assert list(normalize("# no data returned from https://example.org/x")) == []


def test_normalize_strict_drops_invalid_domains():
    body = "ok.example.com\nnot_a_domain\nhost.local\n-bad-.com"
    assert list(normalize(body, validate=True)) == ["ok.example.com"]
    assert "not_a_domain" in list(normalize(body))


def test_validate_domain_length_limit():
    label = "a" * 60
    long_domain = ".".join([label] * 5)
    assert len(long_domain) > 253
    assert not validate_domain(long_domain)
    assert validate_domain("example.com")


@pytest.mark.parametrize("line", [
    "<html>",
    "||ads.example.com^",
    'evil"host.com',
    "http://x.com/path",
    "0.0.0.0 bad|pipe.com",
    "0.0.0.0 <script>",
    "*.wild.example.com",
])
def test_tokens_with_non_hostname_characters_are_dropped(line):
    assert extract_hostname_from_line(line) is None


def test_captive_portal_page_yields_nothing():
    body = '<html>\n<head><title>Login</title></head>\n||ads.example.com^\nevil"host.com\nhttp://x.com/path'
    assert list(normalize(body)) == []
