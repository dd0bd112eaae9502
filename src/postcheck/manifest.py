"""npm package.json manifest model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ManifestError(Exception):
    """The manifest is missing or cannot be parsed.

    A precondition failure: no check can be planned without it.
    """


class Manifest(BaseModel):
    """The parts of package.json the planner reads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="devDependencies"
    )
    scripts: dict[str, str] = Field(default_factory=dict)

    @field_validator("dependencies", "dev_dependencies", "scripts", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return {} if value is None else value

    @classmethod
    def load(cls, path: Path) -> Manifest:
        """Read and validate a manifest file.

        Raises:
            ManifestError: If the file is missing, unreadable or not a
                valid manifest
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot read manifest {path}: {e}") from e

        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest {path}: {e}") from e

    def declares(self, package: str) -> bool:
        """True if package is a runtime or development dependency."""
        return package in self.dependencies or package in self.dev_dependencies

    def script(self, name: str) -> str | None:
        """Return a script body, treating blank scripts as absent."""
        body = self.scripts.get(name)
        if body is None or not body.strip():
            return None
        return body
