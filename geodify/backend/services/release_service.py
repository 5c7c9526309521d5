"""
Release service for resolving which Geode loader build to download.

Nightly builds come from the GitHub "nightly" release. Stable builds are
looked up in the Geode Index, with the GitHub latest release as fallback.
"""

import logging
from typing import Optional

import requests

from geodify import __version__
from geodify.backend.models.configuration import ReleaseInfo, CHANNEL_NIGHTLY, CHANNEL_STABLE

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GEODE_REPO = "geode-sdk/geode"
GEODE_INDEX_LATEST_URL = "https://api.geode-sdk.org/v1/loader/versions/latest?platform=win"
DOWNLOAD_URL_TEMPLATE = "https://github.com/geode-sdk/geode/releases/download/{tag}/geode-{tag}-win.zip"
NIGHTLY_TAG = "nightly"
WINDOWS_ASSET_SUFFIX = "win.zip"


class ReleaseResolutionError(Exception):
    """No usable release could be resolved for the requested channel."""


class ReleaseService:
    """Resolves Geode loader releases via the GitHub API and the Geode Index."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout
        self.headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': f'Geodify/{__version__}'
        }

    def _get_json(self, url: str) -> dict:
        logger.debug(f"GET {url}")
        response = requests.get(url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def resolve(self, channel: str) -> ReleaseInfo:
        """
        Resolve the release for channel ('nightly' or 'stable').

        Raises:
            ReleaseResolutionError: if no tag or asset could be found
        """
        if channel == CHANNEL_NIGHTLY:
            return self.resolve_nightly()
        if channel == CHANNEL_STABLE:
            return self.resolve_stable()
        raise ReleaseResolutionError(f"Unknown channel: {channel}")

    def resolve_nightly(self) -> ReleaseInfo:
        url = f"{GITHUB_API_BASE}/repos/{GEODE_REPO}/releases/tags/{NIGHTLY_TAG}"
        logger.info("Resolving nightly asset URL from GitHub API...")
        try:
            release_data = self._get_json(url)
        except (requests.RequestException, ValueError) as e:
            raise ReleaseResolutionError(f"Failed to fetch nightly release info from GitHub API: {e}") from e

        for asset in release_data.get('assets') or []:
            name = asset.get('name') or ''
            download_url = asset.get('browser_download_url')
            if name.endswith(WINDOWS_ASSET_SUFFIX) and download_url:
                logger.info(f"Nightly asset: {download_url}")
                return ReleaseInfo(tag=NIGHTLY_TAG, download_url=download_url, channel=CHANNEL_NIGHTLY)

        raise ReleaseResolutionError("Could not find a win.zip asset in the nightly release.")

    def _tag_from_index(self) -> Optional[str]:
        try:
            data = self._get_json(GEODE_INDEX_LATEST_URL)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geode Index lookup failed: {e}")
            return None
        payload = data.get('payload') if isinstance(data, dict) else None
        if isinstance(payload, dict) and payload.get('tag'):
            return str(payload['tag'])
        logger.warning("Geode Index response has no payload.tag")
        return None

    def _tag_from_github(self) -> Optional[str]:
        url = f"{GITHUB_API_BASE}/repos/{GEODE_REPO}/releases/latest"
        try:
            data = self._get_json(url)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"GitHub latest release lookup failed: {e}")
            return None
        tag = data.get('tag_name') if isinstance(data, dict) else None
        return str(tag) if tag else None

    def resolve_stable(self) -> ReleaseInfo:
        logger.info("Fetching latest stable version from Geode Index...")
        tag = self._tag_from_index()
        if not tag:
            logger.info("Geode Index failed, falling back to GitHub API...")
            tag = self._tag_from_github()
        if not tag:
            raise ReleaseResolutionError(
                "Failed to resolve latest stable version from Geode Index or GitHub."
            )
        return ReleaseInfo(
            tag=tag,
            download_url=DOWNLOAD_URL_TEMPLATE.format(tag=tag),
            channel=CHANNEL_STABLE,
        )
