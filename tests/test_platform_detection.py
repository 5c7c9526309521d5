import os

import pytest

from geodify.backend.services import platform_detection_service
from geodify.backend.services.platform_detection_service import PlatformDetectionService


@pytest.fixture
def no_commands(monkeypatch):
    monkeypatch.setattr(platform_detection_service.shutil, "which", lambda name: None)


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("XDG_SESSION_TYPE", raising=False)
    monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)


def test_gpu_other_when_nothing_found(tmp_path, no_commands):
    assert PlatformDetectionService(sys_root=tmp_path).detect_gpu_type() == "other"


def test_gpu_from_proc_driver(tmp_path, no_commands):
    version = tmp_path / "proc" / "driver" / "nvidia" / "version"
    version.parent.mkdir(parents=True)
    version.write_text("NVRM version: 550.54")
    assert PlatformDetectionService(sys_root=tmp_path).detect_gpu_type() == "nvidia"


def test_gpu_from_pci_vendor(tmp_path, no_commands):
    vendor = tmp_path / "sys" / "bus" / "pci" / "devices" / "0000:01:00.0" / "vendor"
    vendor.parent.mkdir(parents=True)
    vendor.write_text("0x10de\n")
    assert PlatformDetectionService(sys_root=tmp_path).detect_gpu_type() == "nvidia"


def test_gpu_ignores_other_vendors(tmp_path, no_commands):
    vendor = tmp_path / "sys" / "class" / "drm" / "card0" / "device" / "vendor"
    vendor.parent.mkdir(parents=True)
    vendor.write_text("0x1002\n")
    assert PlatformDetectionService(sys_root=tmp_path).detect_gpu_type() == "other"


def test_gpu_result_is_cached(tmp_path, no_commands):
    service = PlatformDetectionService(sys_root=tmp_path)
    assert service.detect_gpu_type() == "other"
    (tmp_path / "proc" / "driver" / "nvidia").mkdir(parents=True)
    (tmp_path / "proc" / "driver" / "nvidia" / "version").write_text("x")
    assert PlatformDetectionService.get_instance().detect_gpu_type() == "other"


def test_display_from_session_type(tmp_path, clean_env, monkeypatch):
    monkeypatch.setenv("XDG_SESSION_TYPE", "x11")
    monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")
    assert PlatformDetectionService(run_root=tmp_path).detect_display_server() == "x11"


def test_display_from_wayland_display(tmp_path, clean_env, monkeypatch):
    monkeypatch.setenv("WAYLAND_DISPLAY", "wayland-0")
    assert PlatformDetectionService(run_root=tmp_path).detect_display_server() == "wayland"


def test_display_from_runtime_socket(tmp_path, clean_env):
    runtime = tmp_path / str(os.getuid())
    runtime.mkdir()
    (runtime / "wayland-1").write_text("")
    assert PlatformDetectionService(run_root=tmp_path).detect_display_server() == "wayland"


def test_display_defaults_to_x11(tmp_path, clean_env):
    assert PlatformDetectionService(run_root=tmp_path).detect_display_server() == "x11"
