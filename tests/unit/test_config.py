"""Unit tests for preview configuration loading."""

import pytest

from texpreview.utils import config as config_module
from texpreview.utils.config import PreviewConfigError, load_preview_config


@pytest.fixture(autouse=True)
def no_user_config(monkeypatch):
    """Ignore any TEXPREVIEW_CONFIG_PATH set in the environment."""
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", None)


@pytest.mark.unit
def test_defaults():
    config = load_preview_config()

    assert config["entry"]["default_name"] == "main.tex"
    assert config["environments"]["reference_width_cm"] == 21.0
    assert config["formatter"]["fixed_vspace"] == {"smallskip": "3pt", "medskip": "6pt", "bigskip": "12pt"}
    assert "documentclass" in config["stripper"]["preamble_directives"]
    assert config["scheduler"]["quiet_interval_s"] == 1.0


@pytest.mark.unit
def test_overrides_applied_last(tmp_path):
    user_file = tmp_path / "preview.yaml"
    user_file.write_text("math:\n  font_size: 14\n  fontset: stix\n")

    config = load_preview_config(user_file, overrides={"math": {"font_size": 16}})

    assert config["math"]["font_size"] == 16
    assert config["math"]["fontset"] == "stix"
    assert config["math"]["hash_salt"] == "texpreview"


@pytest.mark.unit
def test_returns_plain_dict():
    config = load_preview_config()

    assert type(config) is dict
    assert type(config["assets"]["raster_extensions"]) is list


@pytest.mark.unit
def test_unknown_key_rejected(tmp_path):
    user_file = tmp_path / "preview.yaml"
    user_file.write_text("formatter:\n  colour: red\n")

    with pytest.raises(PreviewConfigError):
        load_preview_config(user_file)


@pytest.mark.unit
def test_unknown_override_rejected():
    with pytest.raises(PreviewConfigError):
        load_preview_config(overrides={"renderer": {"mode": "fast"}})


@pytest.mark.unit
def test_missing_file(tmp_path):
    with pytest.raises(PreviewConfigError, match="not found"):
        load_preview_config(tmp_path / "absent.yaml")


@pytest.mark.unit
def test_environment_path_used(tmp_path, monkeypatch):
    user_file = tmp_path / "env.yaml"
    user_file.write_text("scheduler:\n  quiet_interval_s: 0.25\n")
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", str(user_file))

    assert load_preview_config()["scheduler"]["quiet_interval_s"] == 0.25
