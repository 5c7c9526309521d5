import pytest
import requests

from geodify.backend.services import release_service
from geodify.backend.services.release_service import ReleaseResolutionError, ReleaseService


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    responses = {}
    calls = []

    def get(url, headers=None, timeout=None):
        calls.append(url)
        response = responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response or FakeResponse(status=404)

    monkeypatch.setattr(release_service.requests, "get", get)
    get.responses = responses
    get.calls = calls
    return get


NIGHTLY_URL = "https://api.github.com/repos/geode-sdk/geode/releases/tags/nightly"
LATEST_URL = "https://api.github.com/repos/geode-sdk/geode/releases/latest"
INDEX_URL = release_service.GEODE_INDEX_LATEST_URL


def test_nightly_picks_windows_asset(fake_get):
    fake_get.responses[NIGHTLY_URL] = FakeResponse({"assets": [
        {"name": "geode-nightly-mac.zip", "browser_download_url": "https://x/mac.zip"},
        {"name": "geode-nightly-win.zip", "browser_download_url": "https://x/win.zip"},
    ]})
    release = ReleaseService().resolve("nightly")
    assert release.tag == "nightly"
    assert release.download_url == "https://x/win.zip"
    assert release.channel == "nightly"


def test_nightly_without_windows_asset(fake_get):
    fake_get.responses[NIGHTLY_URL] = FakeResponse({"assets": [{"name": "a-mac.zip"}]})
    with pytest.raises(ReleaseResolutionError, match="win.zip"):
        ReleaseService().resolve("nightly")


def test_nightly_network_failure(fake_get):
    fake_get.responses[NIGHTLY_URL] = requests.ConnectionError("offline")
    with pytest.raises(ReleaseResolutionError, match="offline"):
        ReleaseService().resolve("nightly")


def test_stable_uses_index_tag(fake_get):
    fake_get.responses[INDEX_URL] = FakeResponse({"payload": {"tag": "v4.2.0"}})
    release = ReleaseService().resolve("stable")
    assert release.tag == "v4.2.0"
    assert release.download_url == (
        "https://github.com/geode-sdk/geode/releases/download/v4.2.0/geode-v4.2.0-win.zip"
    )
    assert LATEST_URL not in fake_get.calls


def test_stable_falls_back_to_github(fake_get):
    fake_get.responses[INDEX_URL] = FakeResponse({"payload": None, "error": "oops"})
    fake_get.responses[LATEST_URL] = FakeResponse({"tag_name": "v4.1.2"})
    release = ReleaseService().resolve("stable")
    assert release.tag == "v4.1.2"
    assert fake_get.calls == [INDEX_URL, LATEST_URL]


def test_stable_fails_when_both_sources_fail(fake_get):
    fake_get.responses[INDEX_URL] = FakeResponse(status=500)
    with pytest.raises(ReleaseResolutionError):
        ReleaseService().resolve("stable")


def test_unknown_channel(fake_get):
    with pytest.raises(ReleaseResolutionError):
        ReleaseService().resolve("beta")
