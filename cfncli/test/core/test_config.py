"""Tests for cfncli.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from cfncli.core.config import (
    ApplySettings,
    AwsSettings,
    Settings,
    load_settings,
    resolve_settings,
)
from cfncli.core.result import Err, Ok


class TestDefaults:
    def test_apply_defaults(self) -> None:
        settings = ApplySettings()
        assert settings.interval == 10
        assert settings.timeout == 1800
        assert settings.fail_on_noop is False
        assert settings.log_level == 1

    def test_aws_defaults(self) -> None:
        assert AwsSettings() == AwsSettings(region=None, endpoint_url=None)

    def test_frozen(self) -> None:
        settings = Settings()
        with pytest.raises(AttributeError):
            settings.apply = ApplySettings()  # type: ignore[misc]


class TestFromDict:
    def test_empty(self) -> None:
        assert Settings.from_dict({}) == Settings()

    def test_values(self) -> None:
        settings = Settings.from_dict(
            {
                "apply": {"interval": 5, "timeout": 60.5, "fail_on_noop": True, "log_level": 0},
                "aws": {"region": "eu-west-1", "endpoint_url": "http://localhost:4566"},
            }
        )
        assert settings.apply == ApplySettings(interval=5, timeout=60.5, fail_on_noop=True, log_level=0)
        assert settings.aws.region == "eu-west-1"
        assert settings.aws.endpoint_url == "http://localhost:4566"

    def test_zero_interval_is_kept_for_later_validation(self) -> None:
        settings = Settings.from_dict({"apply": {"interval": 0}})
        assert settings.apply.interval == 0

    def test_log_level_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="log_level"):
            Settings.from_dict({"apply": {"log_level": 9}})


class TestLoadSettings:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "cfncli.toml"
        path.write_text('[apply]\ninterval = 2\n\n[aws]\nregion = "us-east-1"\n')

        result = load_settings(path)
        assert isinstance(result, Ok)
        assert result.value.apply.interval == 2
        assert result.value.aws.region == "us-east-1"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_settings(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "cfncli.toml"
        path.write_text("[apply\n")

        result = load_settings(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "cfncli.toml"
        path.write_text("[apply]\nlog_level = 7\n")

        result = load_settings(path)
        assert isinstance(result, Err)
        assert result.error.path == path


class TestResolveSettings:
    def test_no_file_gives_defaults(self, tmp_path: Path) -> None:
        assert resolve_settings(None, cwd=tmp_path) == Ok(Settings())

    def test_default_file_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "cfncli.toml").write_text("[apply]\ntimeout = 30\n")

        result = resolve_settings(None, cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.apply.timeout == 30

    def test_explicit_missing_file_is_an_error(self, tmp_path: Path) -> None:
        result = resolve_settings(tmp_path / "other.toml", cwd=tmp_path)
        assert isinstance(result, Err)
