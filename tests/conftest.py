import logging

import pytest

from geodify.backend.handlers.config_handler import ConfigHandler
from geodify.backend.services.platform_detection_service import PlatformDetectionService


LOCALCONFIG = """"UserLocalConfigStore"
{
	"Software"
	{
		"Valve"
		{
			"Steam"
			{
				"apps"
				{
					"730"
					{
						"LastPlayed"		"1700000000"
						"LaunchOptions"		"-novid"
					}
				}
			}
		}
	}
}
"""

CONFIG_VDF = """"InstallConfigStore"
{
	"Software"
	{
		"Valve"
		{
			"Steam"
			{
				"CompatToolMapping"
				{
					"0"
					{
						"name"		"proton_experimental"
						"config"		""
						"priority"		"75"
					}
				}
			}
		}
	}
}
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME and the XDG dirs at a scratch directory for every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    ConfigHandler.reset()
    PlatformDetectionService.reset()
    yield home
    ConfigHandler.reset()
    PlatformDetectionService.reset()
    app_logger = logging.getLogger("geodify")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()


def make_compat_tool(parent, folder_name, internal_name, display_name=None):
    """Create a compatibility tool folder with a compatibilitytool.vdf descriptor."""
    folder = parent / folder_name
    folder.mkdir(parents=True)
    display = f'\t\t\t"display_name"\t"{display_name}"\n' if display_name else ""
    (folder / "compatibilitytool.vdf").write_text(
        '"compatibilitytools"\n'
        '{\n'
        '\t"compat_tools"\n'
        '\t{\n'
        f'\t\t"{internal_name}"\n'
        '\t\t{\n'
        '\t\t\t"install_path"\t"."\n'
        f'{display}'
        '\t\t\t"from_oslist"\t"windows"\n'
        '\t\t\t"to_oslist"\t"linux"\n'
        '\t\t}\n'
        '\t}\n'
        '}\n'
    )
    return folder


@pytest.fixture
def steam_root(isolated_home):
    """A minimal Steam root with config.vdf and one user's localconfig.vdf."""
    root = isolated_home / ".local" / "share" / "Steam"
    (root / "config").mkdir(parents=True)
    (root / "config" / "config.vdf").write_text(CONFIG_VDF)
    user_config = root / "userdata" / "12345" / "config"
    user_config.mkdir(parents=True)
    (user_config / "localconfig.vdf").write_text(LOCALCONFIG)
    (root / "steamapps").mkdir()
    return root
