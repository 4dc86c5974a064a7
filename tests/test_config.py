from __future__ import annotations

import pytest

from proto2elm.config import DEFAULT_EXCLUDED_FILES, GeneratorConfig
from proto2elm.errors import ConfigurationError, Proto2ElmError


def test_generator_config_defaults() -> None:
    config = GeneratorConfig.from_parameter_string(None)

    assert config.remove_deprecated is False
    assert config.module_prefix == ""
    assert config.excluded_files == DEFAULT_EXCLUDED_FILES
    assert config.debug is False
    assert config.naming_config is None
    assert config == GeneratorConfig()


def test_generator_config_parses_all_options(tmp_path) -> None:
    naming_path = tmp_path / "naming.json"
    parameter = (
        "remove-deprecated,module-prefix=Api.Proto,"
        f"exclude=vendor/a.proto,exclude=vendor/b.proto,debug,naming-config={naming_path}"
    )

    config = GeneratorConfig.from_parameter_string(parameter)

    assert config.remove_deprecated is True
    assert config.module_prefix == "Api.Proto"
    assert config.debug is True
    assert config.naming_config == str(naming_path)
    assert config.excluded_files == DEFAULT_EXCLUDED_FILES | {"vendor/a.proto", "vendor/b.proto"}
    assert config.is_excluded("vendor/b.proto")
    assert config.is_excluded("google/protobuf/wrappers.proto")
    assert not config.is_excluded("example/person.proto")


@pytest.mark.parametrize(
    ("parameter", "expected"),
    [
        ("remove-deprecated=true", True),
        ("remove-deprecated=1", True),
        ("remove-deprecated=false", False),
        ("remove-deprecated=off", False),
    ],
)
def test_generator_config_accepts_boolean_values(parameter: str, expected: bool) -> None:
    assert GeneratorConfig.from_parameter_string(parameter).remove_deprecated is expected


def test_generator_config_ignores_empty_chunks() -> None:
    config = GeneratorConfig.from_parameter_string(" , module-prefix = Api ,,")

    assert config.module_prefix == "Api"


def test_generator_config_rejects_unknown_parameter() -> None:
    with pytest.raises(ConfigurationError, match='unknown parameter: "bogus"'):
        GeneratorConfig.from_parameter_string("remove-deprecated,bogus=1")


def test_generator_config_rejects_missing_values() -> None:
    with pytest.raises(ConfigurationError):
        GeneratorConfig.from_parameter_string("module-prefix")

    with pytest.raises(ConfigurationError):
        GeneratorConfig.from_parameter_string("exclude=")


def test_generator_config_rejects_invalid_boolean() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        GeneratorConfig.from_parameter_string("debug=maybe")

    assert isinstance(excinfo.value, Proto2ElmError)
    assert isinstance(excinfo.value, ValueError)


def test_generator_config_is_immutable() -> None:
    config = GeneratorConfig()

    with pytest.raises(AttributeError):
        config.module_prefix = "Other"  # type: ignore[misc]
