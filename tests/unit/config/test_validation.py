"""Tests for configuration validation."""

from __future__ import annotations

from pathlib import Path

from hubdetect.config.loader import dict_to_config, load_yaml_file
from hubdetect.config.validation import (
    ValidationSeverity,
    validate_config,
    validate_config_file,
)


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_config(self) -> None:
        data = {
            "blackduck": {"url": "https://bd", "name": "demo"},
            "servers": {"blackduck": {"username": "u", "password": "p"}},
            "detect": {"executable_gav": "g:a:latest", "jvm_options": ["-Xmx1g"]},
            "scan_cli": {"offline": True},
            "repositories": ["https://repo"],
        }
        assert validate_config(data, "hubdetect.yml") == []

    def test_unknown_top_level_key_with_suggestion(self) -> None:
        warnings = validate_config({"blackduk": {}}, "hubdetect.yml")

        assert len(warnings) == 1
        assert warnings[0].key == "blackduk"
        assert warnings[0].suggestion == "blackduck"

    def test_unknown_nested_key(self) -> None:
        warnings = validate_config({"detect": {"jvm_option": []}}, "hubdetect.yml")

        assert warnings[0].key == "detect.jvm_option"
        assert warnings[0].suggestion == "jvm_options"

    def test_bad_coordinate(self) -> None:
        warnings = validate_config({"detect": {"executable_gav": "synopsys-detect"}}, "x")
        assert any("group:artifact:version" in w.message for w in warnings)

    def test_wrong_types(self) -> None:
        warnings = validate_config(
            {
                "skip": "yes",
                "detect": {"args": {"a": 1}, "environment": ["A=1"]},
                "scan_cli": {"offline": "true"},
                "repositories": [{"id": "x"}],
            },
            "x",
        )
        keys = {w.key for w in warnings}
        assert keys == {"skip", "detect.args", "detect.environment", "scan_cli.offline", "repositories[0]"}

    def test_single_string_accepted_for_list_keys(self) -> None:
        data = {"detect": {"jvm_options": "-Xmx1g", "args": "--foo", "exclusions": "node_modules"}}

        assert validate_config(data, "hubdetect.yml") == []

    def test_scalar_exclusions_agree_with_loader(self, tmp_path: Path) -> None:
        path = tmp_path / "hubdetect.yml"
        path.write_text("detect:\n  exclusions: node_modules\n")

        is_valid, issues = validate_config_file(path)
        config = dict_to_config(load_yaml_file(path))

        assert is_valid
        assert issues == []
        assert config.detect.exclusions == ["node_modules"]


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_missing_file(self, tmp_path: Path) -> None:
        is_valid, issues = validate_config_file(tmp_path / "hubdetect.yml")

        assert not is_valid
        assert issues[0].severity == ValidationSeverity.ERROR

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "hubdetect.yml"
        path.write_text("detect: [broken\n")

        is_valid, issues = validate_config_file(path)

        assert not is_valid
        assert "Invalid YAML" in issues[0].message

    def test_unknown_key_is_warning(self, tmp_path: Path) -> None:
        path = tmp_path / "hubdetect.yml"
        path.write_text("blackduck:\n  nam: demo\n")

        is_valid, issues = validate_config_file(path)

        assert is_valid
        assert issues[0].severity == ValidationSeverity.WARNING
        assert issues[0].suggestion == "name"

    def test_type_error_is_error(self, tmp_path: Path) -> None:
        path = tmp_path / "hubdetect.yml"
        path.write_text("scan_cli:\n  offline: sometimes\n")

        is_valid, issues = validate_config_file(path)

        assert not is_valid
        assert issues[0].severity == ValidationSeverity.ERROR

    def test_empty_file_is_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "hubdetect.yml"
        path.write_text("")

        assert validate_config_file(path) == (True, [])
