"""
Configuration Data Models

Data structures shared between the detection backend and the CLI frontend.
"""

from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

GD_APP_ID = "322170"

CHANNEL_NIGHTLY = "nightly"
CHANNEL_STABLE = "stable"

GPU_NVIDIA = "nvidia"
GPU_OTHER = "other"

DISPLAY_WAYLAND = "wayland"
DISPLAY_X11 = "x11"


@dataclass
class ProtonVersion:
    """One installed compatibility tool."""
    internal_name: str
    display_name: str
    source: str

    def label(self) -> str:
        return f"{self.display_name}  ({self.internal_name}) - {self.source}"


@dataclass
class ReleaseInfo:
    """A resolved Geode loader release."""
    tag: str
    download_url: str
    channel: str = CHANNEL_NIGHTLY


@dataclass
class SystemInfo:
    """Results of probing the local system."""
    gpu_type: str = GPU_OTHER
    display_server: str = DISPLAY_X11
    steam_root: Optional[Path] = None
    library_paths: List[Path] = field(default_factory=list)
    game_path: Optional[Path] = None
    proton_versions: List[ProtonVersion] = field(default_factory=list)
    best_proton: Optional[ProtonVersion] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'gpu_type': self.gpu_type,
            'display_server': self.display_server,
            'steam_root': str(self.steam_root) if self.steam_root else None,
            'library_paths': [str(p) for p in self.library_paths],
            'game_path': str(self.game_path) if self.game_path else None,
            'proton_versions': [p.internal_name for p in self.proton_versions],
            'best_proton': self.best_proton.internal_name if self.best_proton else None,
        }


@dataclass
class InstallContext:
    """Values gathered by the setup wizard and consumed by the install workflow."""
    verbose: bool = False
    channel: str = CHANNEL_NIGHTLY
    gpu_type: str = GPU_OTHER
    display_server: str = DISPLAY_X11
    game_path: Optional[Path] = None
    proton_name: Optional[str] = None
    custom_proton_path: Optional[Path] = None
    launch_options: str = ""
    app_id: str = GD_APP_ID

    def __post_init__(self):
        """Convert string paths to Path objects."""
        if isinstance(self.game_path, str):
            self.game_path = Path(self.game_path)
        if isinstance(self.custom_proton_path, str):
            self.custom_proton_path = Path(self.custom_proton_path)

    @classmethod
    def from_system_info(cls, system_info: SystemInfo, **overrides) -> 'InstallContext':
        """Seed a context with detected values."""
        context = cls(
            gpu_type=system_info.gpu_type,
            display_server=system_info.display_server,
            game_path=system_info.game_path,
            proton_name=system_info.best_proton.internal_name if system_info.best_proton else None,
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(context, key, value)
        context.__post_init__()
        return context

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verbose': self.verbose,
            'channel': self.channel,
            'gpu_type': self.gpu_type,
            'display_server': self.display_server,
            'game_path': str(self.game_path) if self.game_path else None,
            'proton_name': self.proton_name,
            'custom_proton_path': str(self.custom_proton_path) if self.custom_proton_path else None,
            'launch_options': self.launch_options,
            'app_id': self.app_id,
        }
