import zipfile

import pytest

from geodify.backend.handlers.filesystem_handler import FileSystemHandler
from geodify.backend.models.configuration import ReleaseInfo
from geodify.backend.services.geode_install_service import GeodeInstallService, InstallError

RELEASE = ReleaseInfo(tag="v4.2.0", download_url="https://example.invalid/geode.zip", channel="stable")


class FakeFileSystem(FileSystemHandler):
    """Downloads by writing a prepared zip instead of hitting the network."""

    def __init__(self, files=None, download_ok=True):
        super().__init__()
        self.files = files or {}
        self.download_ok = download_ok

    def download_file(self, url, destination_path, progress_callback=None):
        if not self.download_ok:
            return False
        with zipfile.ZipFile(destination_path, "w") as zf:
            for name, data in self.files.items():
                zf.writestr(name, data)
        if progress_callback:
            progress_callback(1, 1)
        return True


def test_install_copies_payload_over_game(tmp_path):
    game = tmp_path / "Geometry Dash"
    (game / "geode").mkdir(parents=True)
    (game / "GeometryDash.exe").write_text("game")
    (game / "geode" / "old.txt").write_text("keep")

    files = {"Geode.dll": "dll", "xinput1_4.dll": "proxy", "geode/resources/a.png": "png"}
    GeodeInstallService(FakeFileSystem(files)).install(RELEASE, game)

    assert (game / "Geode.dll").read_text() == "dll"
    assert (game / "geode" / "resources" / "a.png").read_text() == "png"
    assert (game / "geode" / "old.txt").read_text() == "keep"
    assert (game / "GeometryDash.exe").read_text() == "game"


def test_download_failure_raises(tmp_path):
    with pytest.raises(InstallError, match="Download failed"):
        GeodeInstallService(FakeFileSystem(download_ok=False)).install(RELEASE, tmp_path)


def test_bad_archive_raises(tmp_path):
    class CorruptDownload(FakeFileSystem):
        def download_file(self, url, destination_path, progress_callback=None):
            destination_path.write_bytes(b"not a zip")
            return True

    with pytest.raises(InstallError, match="extract"):
        GeodeInstallService(CorruptDownload()).install(RELEASE, tmp_path)


def test_missing_game_path_raises(tmp_path):
    with pytest.raises(InstallError):
        GeodeInstallService(FakeFileSystem()).install(RELEASE, tmp_path / "missing")
