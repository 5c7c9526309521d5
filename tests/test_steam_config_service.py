from geodify.backend.handlers.vdf_patcher import backup_path_for
from geodify.backend.services.steam_config_service import SteamConfigService


def test_configures_config_and_every_localconfig(steam_root):
    second = steam_root / "userdata" / "777" / "config"
    second.mkdir(parents=True)
    (second / "localconfig.vdf").write_text('"UserLocalConfigStore"\n{\n\t"Apps"\n\t{\n\t}\n}\n')

    result = SteamConfigService().configure(steam_root, "GE-Proton9-27", "FOO=1 %command%")

    assert result.ok
    assert result.compat_tool.changed
    assert [uid for uid, _ in result.launch_options] == ["12345", "777"]
    config_text = (steam_root / "config" / "config.vdf").read_text()
    assert '"name"\t\t"GE-Proton9-27"' in config_text
    assert '"LaunchOptions"\t\t"FOO=1 %command%"' in (second / "localconfig.vdf").read_text()
    assert backup_path_for(second / "localconfig.vdf").exists()


def test_failure_in_one_file_does_not_stop_the_rest(steam_root):
    broken = steam_root / "userdata" / "100" / "config"
    broken.mkdir(parents=True)
    (broken / "localconfig.vdf").write_text('"UserLocalConfigStore"\n{\n}\n')

    result = SteamConfigService().configure(steam_root, None, "x")

    assert not result.ok
    assert result.compat_tool_skipped
    assert result.failures == [(broken / "localconfig.vdf", "Apps section not found.")]
    assert [uid for uid, _ in result.launch_options] == ["12345"]
    assert (broken / "localconfig.vdf").read_text() == '"UserLocalConfigStore"\n{\n}\n'


def test_no_steam_root():
    result = SteamConfigService().configure(None, "GE-Proton9-27", "x")
    assert result.steam_root is None
    assert not result.ok
    assert result.launch_options == []


def test_no_localconfig(tmp_path):
    root = tmp_path / "steam"
    (root / "config").mkdir(parents=True)
    (root / "config" / "config.vdf").write_text('"CompatToolMapping"\n{\n}\n')
    result = SteamConfigService(app_id="42").configure(root, "proton_9", "x")
    assert not result.localconfig_found
    assert '"42"' in (root / "config" / "config.vdf").read_text()
