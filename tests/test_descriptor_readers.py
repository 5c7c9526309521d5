from geodify.backend.handlers.vdf_patcher import read_display_name, read_internal_name
from tests.conftest import make_compat_tool


def test_internal_name_is_first_compat_tools_child(tmp_path):
    folder = make_compat_tool(tmp_path, "GE-Proton9-27", "GE-Proton9-27", "GE-Proton 9-27")
    assert read_internal_name(folder / "compatibilitytool.vdf") == "GE-Proton9-27"
    assert read_display_name(folder / "compatibilitytool.vdf") == "GE-Proton 9-27"


def test_internal_name_falls_back_to_flat_key(tmp_path):
    path = tmp_path / "compatibilitytool.vdf"
    path.write_text('"compatibilitytool"\n{\n\t"Internal_Name"\t"my_tool"\n}\n')
    assert read_internal_name(path) == "my_tool"
    assert read_display_name(path) is None


def test_block_names_match_case_insensitively(tmp_path):
    path = tmp_path / "compatibilitytool.vdf"
    path.write_text(
        '"CompatibilityTools"\n{\n\t"Compat_Tools"\n\t{\n'
        '\t\t"proton_cachyos"\n\t\t{\n\t\t\t"Display_Name"\t"CachyOS"\n\t\t}\n\t}\n}\n'
    )
    assert read_internal_name(path) == "proton_cachyos"
    assert read_display_name(path) == "CachyOS"


def test_missing_descriptor_is_a_lookup_miss(tmp_path):
    assert read_internal_name(tmp_path / "absent.vdf") is None
    assert read_display_name(tmp_path / "absent.vdf") is None


def test_unparsable_descriptor_is_a_lookup_miss(tmp_path):
    path = tmp_path / "compatibilitytool.vdf"
    path.write_text('"compatibilitytools"\n{\n\t"compat_tools"\n\t{\n')
    assert read_internal_name(path) is None
