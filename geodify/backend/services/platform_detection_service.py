#!/usr/bin/env python3
"""
Platform Detection Service

Detects the GPU vendor and the display server once at startup so the launch
options can be tailored to them.
"""

import os
import shutil
import logging
import subprocess
from pathlib import Path
from typing import Optional

from geodify.backend.models.configuration import (
    GPU_NVIDIA, GPU_OTHER, DISPLAY_WAYLAND, DISPLAY_X11
)

logger = logging.getLogger(__name__)

NVIDIA_PCI_VENDOR = "0x10de"


def _run_quiet(cmd, timeout: int = 5) -> Optional[subprocess.CompletedProcess]:
    if not shutil.which(cmd[0]):
        return None
    try:
        return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"{cmd[0]} failed: {e}")
        return None


class PlatformDetectionService:
    """
    Service for detecting platform-specific information once at startup

    sys_root and run_root exist so tests can point the probes at a fake tree.
    """

    _instance = None

    def __new__(cls, *args, **kwargs):
        """Singleton pattern to ensure only one instance"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._gpu_type = None
            cls._instance._display_server = None
        return cls._instance

    def __init__(self, sys_root: Path = Path("/"), run_root: Path = Path("/run/user")):
        self.sys_root = Path(sys_root)
        self.run_root = Path(run_root)

    @classmethod
    def reset(cls):
        cls._instance = None

    @classmethod
    def get_instance(cls):
        """Get the singleton instance"""
        return cls()

    # --- GPU ---

    def _nvidia_smi(self) -> bool:
        result = _run_quiet(['nvidia-smi'])
        return result is not None and result.returncode == 0

    def _lsmod(self) -> bool:
        result = _run_quiet(['lsmod'])
        if result is None or result.returncode != 0:
            return False
        return any(line.startswith('nvidia ') for line in result.stdout.splitlines())

    def _proc_driver(self) -> bool:
        return (self.sys_root / "proc/driver/nvidia/version").is_file()

    def _pci_vendor(self) -> bool:
        patterns = ("sys/bus/pci/devices/*/vendor", "sys/class/drm/card*/device/vendor")
        for pattern in patterns:
            for vendor_file in self.sys_root.glob(pattern):
                try:
                    if vendor_file.read_text().strip().lower() == NVIDIA_PCI_VENDOR:
                        return True
                except OSError:
                    continue
        return False

    def _lspci(self) -> bool:
        result = _run_quiet(['lspci'])
        if result is None or result.returncode != 0:
            return False
        for line in result.stdout.splitlines():
            lowered = line.lower()
            if any(kind in lowered for kind in ('vga', '3d', 'display')) and 'nvidia' in lowered:
                return True
        return False

    def detect_gpu_type(self) -> str:
        """Return 'nvidia' if any probe sees an Nvidia GPU, otherwise 'other'."""
        if self._gpu_type is not None:
            return self._gpu_type

        probes = (self._nvidia_smi, self._lsmod, self._proc_driver, self._pci_vendor, self._lspci)
        self._gpu_type = GPU_OTHER
        for probe in probes:
            try:
                if probe():
                    logger.info(f"Nvidia GPU detected ({probe.__name__.lstrip('_')})")
                    self._gpu_type = GPU_NVIDIA
                    break
            except Exception as e:
                logger.debug(f"GPU probe {probe.__name__} failed: {e}")
        logger.debug(f"GPU detection complete: {self._gpu_type}")
        return self._gpu_type

    # --- Display server ---

    def detect_display_server(self) -> str:
        """Return 'wayland' or 'x11'. Falls back to x11."""
        if self._display_server is not None:
            return self._display_server

        session_type = os.environ.get('XDG_SESSION_TYPE', '').lower()
        if session_type in (DISPLAY_WAYLAND, DISPLAY_X11):
            logger.debug(f"Display server from XDG_SESSION_TYPE: {session_type}")
            self._display_server = session_type
        elif os.environ.get('WAYLAND_DISPLAY'):
            logger.debug("Display server from WAYLAND_DISPLAY: wayland")
            self._display_server = DISPLAY_WAYLAND
        elif any((self.run_root / str(os.getuid())).glob('wayland-*')):
            logger.debug("Wayland socket found in runtime dir")
            self._display_server = DISPLAY_WAYLAND
        else:
            self._display_server = DISPLAY_X11
        logger.info(f"Display server: {self._display_server}")
        return self._display_server
