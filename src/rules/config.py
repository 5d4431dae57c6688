from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from harness.materialize import DEFAULT_HARNESS_SUFFIX
from harness.renamer import DEFAULT_RENAMED_SUFFIX, DEFAULT_TEST_SUFFIX
from loader.go_list import DEFAULT_BUILD_FLAGS
from utils import GO_SOURCE_SUFFIX

CONFIG_FILENAME = "fuzzbuild.toml"

DEFAULT_SHIM_IMPORT = "github.com/AdamKorcz/go-118-fuzz-build/testing"

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class FuzzBuildConfig(BaseModel):
    """Configuration for rewriting a Go package tree into a fuzz build."""

    model_config = ConfigDict(extra="forbid")

    harness_name: str = Field(
        default="Fuzz",
        description="Name of the fuzz entry function to clone",
    )
    original_import: str = Field(
        default="testing",
        description="Import path replaced by the shim",
    )
    shim_import: str = Field(
        default=DEFAULT_SHIM_IMPORT,
        description="Import path of the shim package",
    )
    custom_qualifier: str = Field(
        default="customFuzzTestingPkg",
        description="Alias used for the shim when retargeting parameters",
    )
    fuzz_type_name: str = Field(
        default="F",
        description="Member of the original package whose pointer params are retargeted",
    )
    harness_suffix: str = Field(
        default=DEFAULT_HARNESS_SUFFIX,
        description="Suffix replacing '.go' in the harness clone filename",
    )
    test_suffix: str = Field(
        default=DEFAULT_TEST_SUFFIX,
        description="Suffix identifying test-only files",
    )
    renamed_suffix: str = Field(
        default=DEFAULT_RENAMED_SUFFIX,
        description="Suffix replacing the test suffix on renamed files",
    )
    retarget_params: bool = Field(
        default=False,
        description="Retarget *testing.F parameters to the shim alias",
    )
    go_binary: str = Field(
        default="go",
        description="Go toolchain binary used for package loading",
    )
    build_flags: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BUILD_FLAGS),
        description="Build flags passed to 'go list'",
    )

    @field_validator("harness_name", "custom_qualifier", "fuzz_type_name")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not _IDENTIFIER_RE.fullmatch(v):
            msg = f"'{v}' is not a Go identifier"
            raise ValueError(msg)
        return v

    @field_validator("harness_suffix", "test_suffix", "renamed_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        if not v.endswith(GO_SOURCE_SUFFIX) or v == GO_SOURCE_SUFFIX:
            msg = f"suffix '{v}' must end with '{GO_SOURCE_SUFFIX}' and name something"
            raise ValueError(msg)
        return v

    @field_validator("original_import", "shim_import")
    @classmethod
    def validate_import_path(cls, v: str) -> str:
        if not v or v != v.strip() or '"' in v:
            msg = f"invalid import path '{v}'"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_suffixes_distinct(self) -> FuzzBuildConfig:
        """Renamed and cloned files must not look like test files again."""
        for name in ("harness_suffix", "renamed_suffix"):
            value = getattr(self, name)
            if value.endswith(self.test_suffix):
                msg = f"{name} '{value}' must not end with test_suffix '{self.test_suffix}'"
                raise ValueError(msg)
        if self.original_import == self.shim_import:
            msg = "shim_import must differ from original_import"
            raise ValueError(msg)
        return self

    @property
    def original_qualifier(self) -> str:
        """Package name the original import is referenced by."""
        return self.original_import.rsplit("/", 1)[-1]

    @property
    def fuzz_type(self) -> str:
        return f"{self.original_qualifier}.{self.fuzz_type_name}"


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path, **overrides: Any) -> FuzzBuildConfig:
    """Load configuration from fuzzbuild.toml if it exists.

    Keyword overrides (for example from command-line flags) replace file
    values; ``None`` overrides are ignored.
    """
    config_path = Path(root) / CONFIG_FILENAME

    data: dict[str, Any] = {}
    if config_path.is_file():
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {config_path}: {e}"
            raise ConfigError(msg) from e

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return FuzzBuildConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
