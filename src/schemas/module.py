"""Pydantic model for buildpack module identity."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModuleInfo(BaseModel):
    """Identity of a buildpack module.

    The ID and version determine the layer file name and the directory
    the module's content is mounted under, so both must be usable as
    path segments once the ID is escaped.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Module identifier (e.g., 'heroku/nodejs')")
    version: str = Field(min_length=1, description="Module version (e.g., '1.2.3')")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Reject IDs that escape to a relative path segment."""
        if v.replace("/", "_") in (".", ".."):
            raise ValueError(f"Module ID '{v}' is not a valid path segment")
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version is a single path segment."""
        if "/" in v:
            raise ValueError(f"Module version '{v}' must not contain '/'")
        if v in (".", ".."):
            raise ValueError(f"Module version '{v}' is not a valid path segment")
        return v

    def __str__(self) -> str:
        return f"{self.id}:{self.version}"
