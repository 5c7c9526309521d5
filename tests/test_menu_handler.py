from geodify.backend.handlers import menu_handler
from geodify.backend.handlers.menu_handler import MenuHandler, shell_path_completer
from geodify.backend.handlers.path_handler import PathHandler


def scripted(*answers):
    replies = list(answers)

    def fake_input(prompt):
        reply = replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    return fake_input


def test_pick_option_reasks_until_valid(capsys):
    menu = MenuHandler(scripted("7", "abc", "2"))
    assert menu.pick_option("Pick", ["a", "b", "c"]) == 1
    assert capsys.readouterr().out.count("Invalid.") == 2


def test_pick_option_enter_selects_default():
    assert MenuHandler(scripted("")).pick_option("Pick", ["a", "b"], default=1) == 1


def test_pick_option_enter_without_default_reasks():
    assert MenuHandler(scripted("", "1")).pick_option("Pick", ["a", "b"]) == 0


def test_confirm():
    assert MenuHandler(scripted("")).confirm("Go?") is True
    assert MenuHandler(scripted("maybe", "N")).confirm("Go?") is False


def test_get_path_validates_and_normalizes(tmp_path, monkeypatch):
    monkeypatch.setattr(menu_handler, "READLINE_AVAILABLE", False)
    game = tmp_path / "Geometry Dash"
    game.mkdir()
    (game / "GeometryDash.exe").write_text("")
    menu = MenuHandler(scripted(str(tmp_path), f"'{game}/GeometryDash.exe'"))
    path = menu.get_path("Game", PathHandler.is_valid_game_path, PathHandler.normalize_game_path_input)
    assert path == str(game)


def test_get_path_cancel_returns_none(monkeypatch):
    monkeypatch.setattr(menu_handler, "READLINE_AVAILABLE", False)
    assert MenuHandler(scripted(EOFError())).get_path("Game") is None


def test_shell_path_completer(tmp_path):
    (tmp_path / "alpha").mkdir()
    (tmp_path / "alpine.txt").write_text("")
    prefix = str(tmp_path / "al")
    assert shell_path_completer(prefix, 0) == str(tmp_path / "alpha") + "/"
    assert shell_path_completer(prefix, 1) == str(tmp_path / "alpine.txt")
    assert shell_path_completer(prefix, 2) is None
