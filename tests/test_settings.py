from pathlib import Path

from akin.core.config.settings import (
    DEFAULT_SETTINGS,
    Settings,
    SettingsError,
    load_and_merge,
    load_settings_file,
    merged_settings,
)


def _expect_settings_error(overrides):
    try:
        merged_settings(overrides)
        assert False, f"expected SettingsError for {overrides}"
    except SettingsError as e:
        return e


def test_defaults():
    s = load_and_merge(None)
    assert s == Settings()
    assert s.as_dict() == DEFAULT_SETTINGS


def test_settings_file_overrides_defaults():
    s = load_and_merge("examples/settings.yaml")
    assert s.ref_marker == "$"
    assert s.joint_marker == "^"
    assert s.none_marker == "EMPTY"
    assert s.decl_keyword == "let"


def test_empty_settings_file(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_settings_file(p) == {}


def test_unknown_key_rejected(tmp_path: Path):
    p = tmp_path / "bad.yaml"
    p.write_text("colour: blue\n", encoding="utf-8")
    try:
        load_settings_file(p)
        assert False, "expected SettingsError"
    except SettingsError as e:
        assert "unknown setting" in str(e)


def test_non_mapping_and_invalid_yaml_rejected(tmp_path: Path):
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    q = tmp_path / "broken.yaml"
    q.write_text("ref_marker: [\n", encoding="utf-8")
    for path in (p, q):
        try:
            load_settings_file(path)
            assert False, "expected SettingsError"
        except SettingsError:
            pass


def test_missing_settings_file():
    try:
        load_and_merge("examples/nope.yaml")
        assert False, "expected FileNotFoundError"
    except FileNotFoundError:
        pass


def test_marker_validation():
    assert "single character" in str(_expect_settings_error({"ref_marker": "**"}))
    assert "punctuation" in str(_expect_settings_error({"joint_marker": "x"}))
    assert "punctuation" in str(_expect_settings_error({"ref_marker": "{"}))
    assert "distinct" in str(_expect_settings_error({"joint_marker": "*"}))


def test_word_and_value_validation():
    _expect_settings_error({"decl_keyword": "let me"})
    _expect_settings_error({"none_marker": ""})
    _expect_settings_error({"separator": ""})
    _expect_settings_error({"separator": "x"})
    _expect_settings_error({"interpolate_strings": "yes"})
    _expect_settings_error({"max_range_values": 0})
    _expect_settings_error({"max_range_values": True})


def test_merged_settings_accepts_valid_overrides():
    s = merged_settings({"separator": "\n", "max_range_values": 10})
    assert s.separator == "\n"
    assert s.max_range_values == 10
