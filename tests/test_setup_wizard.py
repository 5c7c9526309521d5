from geodify.backend.models.configuration import InstallContext, ProtonVersion, SystemInfo
from geodify.frontends.cli.menus.setup_wizard import SetupWizardMenu


class ScriptedMenu:
    """Answers pick_option/get_path calls in order."""

    def __init__(self, picks, paths=()):
        self.picks = list(picks)
        self.paths = list(paths)
        self.defaults = []

    def pick_option(self, prompt, options, default=None):
        self.defaults.append(default)
        return self.picks.pop(0)

    def get_path(self, prompt_message, validator=None, normalizer=None):
        raw = self.paths.pop(0)
        value = normalizer(raw) if normalizer else raw
        return value if validator is None or validator(value)[0] else None


GE = ProtonVersion("GE-Proton10-3", "GE-Proton 10-3", "/steam")
EXP = ProtonVersion("proton_experimental", "Proton - Experimental", "Steam")


def _info(tmp_path, versions=(GE, EXP)):
    game = tmp_path / "Geometry Dash"
    game.mkdir(exist_ok=True)
    (game / "GeometryDash.exe").write_text("")
    return SystemInfo(gpu_type="other", display_server="x11", game_path=game,
                      proton_versions=list(versions), best_proton=versions[0] if versions else None)


def test_accepting_defaults_keeps_detected_values(tmp_path):
    info = _info(tmp_path)
    context = InstallContext.from_system_info(info)
    menu = ScriptedMenu([0, 0, 0, 0, 0, 0])

    context = SetupWizardMenu(menu).run(info, context)

    assert context.channel == "nightly"
    assert context.verbose is False
    assert context.game_path == info.game_path
    assert context.proton_name == "GE-Proton10-3"
    assert "PROTON_ENABLE_NVAPI" not in context.launch_options
    assert "SDL_VIDEODRIVER" not in context.launch_options


def test_overrides_are_applied(tmp_path):
    info = _info(tmp_path)
    context = InstallContext.from_system_info(info)
    # verbose, stable, nvidia, wayland, detected path, second listed Proton
    menu = ScriptedMenu([1, 1, 1, 1, 0, 2])

    context = SetupWizardMenu(menu).run(info, context)

    assert context.verbose is True
    assert context.channel == "stable"
    assert context.proton_name == "proton_experimental"
    assert context.launch_options.startswith("PROTON_ENABLE_NVAPI=1")
    assert "SDL_VIDEODRIVER=wayland" in context.launch_options


def test_manual_game_path_and_custom_proton(tmp_path):
    info = _info(tmp_path)
    other = tmp_path / "elsewhere" / "GD"
    other.mkdir(parents=True)
    (other / "libcocos2d.dll").write_text("")
    proton_dir = tmp_path / "MyProton"
    proton_dir.mkdir()
    context = InstallContext.from_system_info(info)
    menu = ScriptedMenu([0, 0, 0, 0, 1, 3], paths=[f"{other}/", f"{proton_dir}/"])

    context = SetupWizardMenu(menu).run(info, context)

    assert context.game_path == other
    assert context.proton_name == "MyProton"
    assert context.custom_proton_path == proton_dir


def test_no_proton_found_can_skip(tmp_path):
    info = _info(tmp_path, versions=())
    context = InstallContext.from_system_info(info)
    menu = ScriptedMenu([0, 0, 0, 0, 0, 0])

    context = SetupWizardMenu(menu).run(info, context)

    assert context.proton_name is None


def test_remembered_proton_is_preselected(tmp_path):
    info = _info(tmp_path)
    context = InstallContext.from_system_info(info, proton_name="proton_experimental")
    menu = ScriptedMenu([0, 0, 0, 0, 0, 2])

    SetupWizardMenu(menu).run(info, context)

    assert menu.defaults[-1] == 2


def test_summary_mentions_notes(tmp_path, capsys):
    context = InstallContext(launch_options="gamemoderun %command%", proton_name="GE-Proton10-3")
    SetupWizardMenu.print_summary(context)
    out = capsys.readouterr().out
    assert "GE-Proton10-3" in out
    assert "gamemode package" in out
