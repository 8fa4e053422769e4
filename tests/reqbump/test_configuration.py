from pathlib import Path

import pytest
from databind.core.converter import ConversionError

from reqbump.configuration import Configuration, UpdaterConfig, load_config
from reqbump.grammar import Ecosystem


def test__load_config__defaults_without_files(tmp_path: Path):
    assert load_config(tmp_path) == UpdaterConfig()
    assert Configuration(tmp_path).get_raw_configuration() == {}


def test__load_config__from_pyproject_toml(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "example"\n\n'
        "[tool.reqbump]\n"
        "pad-precision = false\n"
        'widen-ranges-for = ["setup.py", "*.gemspec"]\n'
        'file-ecosystems = { "constraints.txt" = "pip" }\n'
    )
    config = load_config(tmp_path)
    assert config.pad_precision is False
    assert config.drop_unsatisfiable_exclusions is True
    assert config.widens_ranges("example.gemspec")
    assert config.widens_ranges("lib/setup.py")
    assert not config.widens_ranges("Gemfile")
    assert config.ecosystem_for("deps/constraints.txt", Ecosystem.RUBY) is Ecosystem.PYTHON
    assert config.ecosystem_for("Gemfile", Ecosystem.RUBY) is Ecosystem.RUBY


def test__load_config__prefers_reqbump_toml(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text("[tool.reqbump]\npad-precision = false\n")
    (tmp_path / "reqbump.toml").write_text("drop-unsatisfiable-exclusions = false\n")
    config = load_config(str(tmp_path))
    assert config.pad_precision is True
    assert config.drop_unsatisfiable_exclusions is False


def test__load_config__pyproject_without_section(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "example"\n')
    assert load_config(tmp_path) == UpdaterConfig()


def test__load_config__rejects_unknown_keys(tmp_path: Path):
    (tmp_path / "reqbump.toml").write_text("pad-precisionn = false\n")
    with pytest.raises(ConversionError):
        load_config(tmp_path)


def test__UpdaterConfig__rejects_unknown_ecosystems():
    with pytest.raises(ValueError):
        UpdaterConfig(file_ecosystems={"*.txt": "cargo"})
