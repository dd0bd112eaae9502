"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from postcheck.core.base import BaseConfig, BaseState
from postcheck.core.log import Logger
from postcheck.core.yaml_settings import (
    CONFIG_FILENAME,
    YamlWithIncludesSettingsSource,
)

PLACEHOLDER_TEST_SCRIPT = 'echo "Error: no test specified" && exit 1'

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================


class ProjectConfig(BaseConfig):
    """Location of the project under verification."""

    workdir: Path = Field(
        default_factory=Path.cwd,
        description="Project directory; every check runs here",
    )
    manifest: str = Field(
        default="package.json",
        description="Manifest file name, relative to workdir",
    )

    @property
    def manifest_path(self) -> Path:
        return self.workdir / self.manifest


class CheckCommands(BaseConfig):
    """Argument vectors for the project-level checks."""

    install: list[str] = Field(
        default_factory=lambda: ["npm", "install", "--ignore-scripts"],
        description="Dependency resolution command",
    )
    typecheck: list[str] = Field(
        default_factory=lambda: ["npx", "tsc", "--noEmit"],
        description="Type check command",
    )
    test: list[str] = Field(
        default_factory=lambda: ["npm", "test"],
        description="Test suite command (also reused for deprecations)",
    )
    lint: list[str] = Field(
        default_factory=lambda: ["npm", "run", "lint"],
        description="Lint command",
    )
    build: list[str] = Field(
        default_factory=lambda: ["npm", "run", "build"],
        description="Build command",
    )


class CheckConfig(BaseConfig):
    """Check planning and execution settings."""

    timeout: int = Field(
        default=120,
        description="Timeout for each check in seconds",
    )
    pass_output_limit: int = Field(
        default=500,
        description="Characters of output kept for passing checks",
    )
    fail_output_limit: int = Field(
        default=1000,
        description="Characters of output kept for failing checks",
    )
    source_extensions: list[str] = Field(
        default_factory=lambda: ["ts", "tsx", "js", "jsx"],
        description="File extensions searched for stale references",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "build"],
        description="Directory names skipped by the reference search",
    )
    max_reference_matches: int = Field(
        default=20,
        description="Stale reference matches printed before stopping",
    )
    max_deprecation_lines: int = Field(
        default=10,
        description="Deprecation warning lines printed",
    )
    test_placeholder: str = Field(
        default=PLACEHOLDER_TEST_SCRIPT,
        description="Test script value that means 'no tests defined'",
    )
    typecheck_packages: list[str] = Field(
        default_factory=lambda: ["typescript"],
        description="Dependencies that enable the type check",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for full per-check output logs",
    )
    commands: CheckCommands = Field(
        default_factory=CheckCommands,
        description="Commands for install/typecheck/test/lint/build",
    )


class ReportConfig(BaseConfig):
    """Where the JSON report is written."""

    output_dir: Path | None = Field(
        default=None,
        description="Report directory (defaults to the project workdir)",
    )
    filename: str = Field(
        default="migration-verify-{subject}.json",
        description="Report file name template; {subject} is sanitized",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    project: ProjectConfig = Field(
        default_factory=ProjectConfig,
        description="Project location",
    )
    check: CheckConfig = Field(
        default_factory=CheckConfig,
        description="Check planning and execution settings",
    )
    report: ReportConfig = Field(
        default_factory=ReportConfig,
        description="Report persistence settings",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "postcheck"
        ),
        description="Root directory for log files",
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> Config:
        """Configure the global logger once config has loaded."""
        from postcheck.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            run_name="verify",
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )
        return self

    def close(self):
        """Close the global logger, then any other closeable children."""
        from postcheck.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE (mutable during workflow execution)
# ============================================================


class VerifyState(BaseState):
    """Verification run state."""

    package: str = Field(
        default="unknown",
        description="Subject package the report is named after",
    )
    swap_from: str | None = Field(
        default=None,
        description="Package replaced by the subject, if this was a swap",
    )
    manifest: Any = Field(
        default=None,
        description="Loaded Manifest",
    )
    descriptors: list = Field(
        default_factory=list,
        description="Planned CheckDescriptors, in execution order",
    )
    results: list = Field(
        default_factory=list,
        description="CheckResults, in execution order",
    )
    report: Any = Field(
        default=None,
        description="Assembled Report",
    )
    report_path: Path | None = Field(
        default=None,
        description="Where the report was written",
    )
    status: str = Field(
        default="pending",
        description="pending, planned, checked, complete",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """All runtime state organized by workflow."""

    verify: VerifyState = Field(
        default_factory=VerifyState,
        description="Verification workflow state",
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================


class State(BaseSettings):
    """Configuration plus runtime state; the object every workflow
    node receives.

    Loads from YAML files, .env, environment variables and CLI
    arguments, and validates everything on load.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILENAME,
        env_file=".env",
        env_prefix="POSTCHECK_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Init args, then YAML, .env, environment, file secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = ["State", "Config", "BaseConfig", "BaseState"]
