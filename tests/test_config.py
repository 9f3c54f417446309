from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from jamkit.config import (
    JamConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_jam_section,
    _read_toml,
)
from jamkit.exceptions import ConfigError


@pytest.mark.unit
class TestJamConfig:
    """Tests for JamConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test JamConfig initializes with correct defaults."""
        config = JamConfig()

        assert config.api == "https://api.deps.paketo.io"
        assert config.timeout == 30
        assert config.verify_ssl is True
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns configuration without metadata."""
        config = JamConfig(
            api="https://deps.example.org",
            timeout=5,
            verify_ssl=False,
            source_path=Path("/test/jam.toml"),
        )

        result = config.to_log_dict()

        assert result == {
            "api": "https://deps.example.org",
            "timeout": 5,
            "verify_ssl": False,
        }
        assert "source_path" not in result


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used when provided and exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[jam]\n", encoding="utf-8")
        (tmp_path / "jam.toml").write_text("[jam]\n", encoding="utf-8")

        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        """Test ConfigError raised when explicit path doesn't exist."""
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_jam_toml(self, tmp_path: Path) -> None:
        """Test discovers jam.toml in current directory."""
        config_file = tmp_path / "jam.toml"
        config_file.write_text("[jam]\n", encoding="utf-8")

        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        """Test discovers pyproject.toml with [tool.jam] section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.jam]\ntimeout = 5\n", encoding="utf-8")

        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        """Test ignores pyproject.toml without [tool.jam] section."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.other]\nkey = 'value'\n", encoding="utf-8"
        )

        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result is None

    def test_precedence_order(self, tmp_path: Path) -> None:
        """Test discovery precedence: jam.toml before pyproject.toml."""
        jam_toml = tmp_path / "jam.toml"
        jam_toml.write_text("[jam]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.jam]\n", encoding="utf-8")

        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == jam_toml


@pytest.mark.unit
class TestPyprojectHasJamSection:
    """Tests for _pyproject_has_jam_section helper."""

    def test_returns_true_when_section_exists(self, tmp_path: Path) -> None:
        """Test returns True when pyproject.toml has a [tool.jam] table."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.jam]\nverify_ssl = true\n", encoding="utf-8")

        assert _pyproject_has_jam_section(config_file) is True

    def test_returns_false_on_errors(self, tmp_path: Path) -> None:
        """Test returns False gracefully on parse errors or missing files."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("invalid ][[", encoding="utf-8")
        assert _pyproject_has_jam_section(config_file) is False

        assert _pyproject_has_jam_section(tmp_path / "nonexistent.toml") is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_reads_valid_toml(self, tmp_path: Path) -> None:
        """Test a valid TOML file is parsed into a dict."""
        toml_file = tmp_path / "test.toml"
        toml_file.write_text("[jam]\ntimeout = 10\n", encoding="utf-8")

        result = _read_toml(toml_file)

        assert result == {"jam": {"timeout": 10}}

    def test_raises_error_on_invalid_toml(self, tmp_path: Path) -> None:
        """Test malformed TOML raises ConfigError."""
        toml_file = tmp_path / "invalid.toml"
        toml_file.write_text("invalid ][[ toml", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(toml_file)

        assert "Invalid TOML" in str(exc_info.value)

    def test_raises_error_when_file_not_found(self, tmp_path: Path) -> None:
        """Test an unreadable file raises ConfigError."""
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "nonexistent.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section configuration validator."""

    def test_parses_empty_section(self) -> None:
        """Test parsing empty section returns defaults."""
        result = _parse_section({}, config_path="test.toml")

        assert result == JamConfig()

    def test_parses_all_options(self) -> None:
        """Test every supported option is read and normalized."""
        section = {
            "api": "https://deps.example.org/",
            "timeout": 12,
            "verify_ssl": False,
        }

        result = _parse_section(section, config_path="test.toml")

        assert result.api == "https://deps.example.org"
        assert result.timeout == 12
        assert result.verify_ssl is False

    def test_raises_error_on_unknown_keys(self) -> None:
        """Test unknown keys are rejected by name."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"offline": True}, config_path="test.toml")

        assert "Unknown configuration keys: offline" in str(exc_info.value)

    @pytest.mark.parametrize(
        "section, option",
        [
            ({"api": "ftp://deps.example.org"}, "api"),
            ({"api": 42}, "api"),
            ({"timeout": 0}, "timeout"),
            ({"timeout": "30"}, "timeout"),
            ({"timeout": True}, "timeout"),
            ({"verify_ssl": "yes"}, "verify_ssl"),
        ],
    )
    def test_rejects_invalid_values(self, section: dict, option: str) -> None:
        """Test each option is type checked and names itself in the error."""
        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="test.toml")

        assert exc_info.value.option == option
        assert exc_info.value.details["option"] == option


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_when_no_file(self, tmp_path: Path) -> None:
        """Test defaults are used when no config file is found."""
        with patch("jamkit.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result == JamConfig()

    def test_loads_jam_toml(self, tmp_path: Path) -> None:
        """Test options are loaded from an explicit jam.toml."""
        config_file = tmp_path / "jam.toml"
        config_file.write_text(
            '[jam]\napi = "http://localhost:8080"\ntimeout = 3\n', encoding="utf-8"
        )

        result = load_config(config_file)

        assert result.api == "http://localhost:8080"
        assert result.timeout == 3
        assert result.source_path == config_file.resolve()

    def test_loads_pyproject_section(self, tmp_path: Path) -> None:
        """Test options are loaded from the [tool.jam] table."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.jam]\nverify_ssl = false\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.verify_ssl is False

    def test_file_without_section_uses_defaults(self, tmp_path: Path) -> None:
        """Test a file without a jam section yields defaults."""
        config_file = tmp_path / "jam.toml"
        config_file.write_text("[other]\nkey = 1\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.api == JamConfig().api
        assert result.source_path == config_file.resolve()

    def test_invalid_value_propagates(self, tmp_path: Path) -> None:
        """Test validation errors surface from load_config."""
        config_file = tmp_path / "jam.toml"
        config_file.write_text("[jam]\ntimeout = -1\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(config_file)
