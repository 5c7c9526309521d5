"""
Launch options for Geometry Dash under Proton.
"""

from geodify.backend.models.configuration import GPU_NVIDIA, DISPLAY_WAYLAND

NVIDIA_OPTIONS = (
    "PROTON_ENABLE_NVAPI=1 PROTON_HIDE_NVIDIA_GPU=0 "
    "PROTON_ENABLE_NGX_UPDATER=1 PROTON_ENABLE_NVAPI_REFLEX=1"
)
WAYLAND_OPTIONS = "SDL_VIDEODRIVER=wayland"
COMMON_OPTIONS = (
    "DXVK_ASYNC=1 PROTON_NO_ESYNC=0 PROTON_NO_FSYNC=0 "
    "PROTON_FORCE_LARGE_ADDRESS_AWARE=1 VKD3D_CONFIG=dxr11,dxr "
    "DXVK_CONFIG_FILE=$HOME/.config/dxvk/dxvk.conf VKD3D_FEATURE_LEVEL=12_2 "
    'WINEDLLOVERRIDES="xinput1_4=n,b" gamemoderun %command%'
)


def build_launch_options(gpu_type: str, display_server: str) -> str:
    """Compose the Steam launch options string for the given GPU and display server."""
    parts = []
    if gpu_type == GPU_NVIDIA:
        parts.append(NVIDIA_OPTIONS)
    if display_server == DISPLAY_WAYLAND:
        parts.append(WAYLAND_OPTIONS)
    parts.append(COMMON_OPTIONS)
    return " ".join(parts)


def launch_option_notes(launch_options: str) -> list:
    """Hints worth showing the user for tools referenced by the options."""
    notes = []
    if "gamemoderun" in launch_options:
        notes.append(
            "gamemoderun requires the gamemode package "
            "(sudo apt install gamemode / sudo pacman -S gamemode / sudo dnf install gamemode)."
        )
    if "DXVK_CONFIG_FILE" in launch_options:
        notes.append(
            "DXVK_CONFIG_FILE points to $HOME/.config/dxvk/dxvk.conf. "
            "That file doesn't need to exist, DXVK uses defaults if missing."
        )
    return notes
