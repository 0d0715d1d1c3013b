import pytest

from hostlist_aggregator import FetchError, FetchResult, PipelineEvents


MANIFEST = (
    '"Suspicious","tick","Firebog","KADhosts","https://example.org/kad.txt"\n'
    '"Advertising","std","Firebog","Easylist","https://example.org/easylist.txt"\n'
    '"Tracking","cross","Firebog","Spy","https://example.org/spy.txt"\n'
    '"Malicious","tick","Firebog","Phishing","https://example.org/phishing.txt"\n'
)


class FakeFetcher:
    """Serves canned bodies; URLs listed in ``failing`` behave like network errors."""

    def __init__(self, bodies=None, failing=()):
        self.bodies = dict(bodies or {})
        self.failing = set(failing)
        self.requested = []

    def fetch_or_raise(self, url):
        self.requested.append(url)
        if url in self.failing or url not in self.bodies:
            raise FetchError(url, "connection refused")
        return self.bodies[url]

    def fetch(self, url):
        try:
            return FetchResult(url=url, body=self.fetch_or_raise(url))
        except FetchError as e:
            return FetchResult.failed(url, e.reason)

    def close(self):
        pass


class RecordingEvents(PipelineEvents):

    def __init__(self):
        self.calls = []

    def sources_resolved(self, sources):
        self.calls.append(("sources_resolved", len(sources)))

    def fetch_finished(self, source, result, entries):
        self.calls.append(("fetch_finished", source.url, result.ok, entries))

    def aggregated(self, unique_entries):
        self.calls.append(("aggregated", unique_entries))

    def aborted(self, error):
        self.calls.append(("aborted", type(error).__name__))

    def published(self, target, backup, entries):
        self.calls.append(("published", target, backup, entries))


@pytest.fixture
def manifest_text():
    return MANIFEST


@pytest.fixture
def events():
    return RecordingEvents()
