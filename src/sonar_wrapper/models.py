"""Configuration models for the SonarQube environment wrapper."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TriggersConfig(BaseModel):
    """Build triggers that skip analysis. Carried through untouched."""

    model_config = ConfigDict(frozen=True)

    skip_scm_cause: bool = False
    skip_upstream_cause: bool = False
    env_var: str | None = None


class SonarInstallation(BaseModel):
    """One named SonarQube server setup."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    server_url: str | None = None
    database_url: str | None = None
    database_login: str | None = None
    database_password: str | None = None
    mojo_version: str | None = None
    additional_args: str | None = None
    triggers: TriggersConfig = Field(default_factory=TriggersConfig)
    sonar_login: str | None = None
    sonar_password: str | None = None
    additional_properties: str | None = None

    @field_validator(
        "name",
        "server_url",
        "database_url",
        "database_login",
        "database_password",
        "mojo_version",
        "additional_args",
        "sonar_login",
        "sonar_password",
        "additional_properties",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, v):
        """Treat blank strings as unset and unquoted YAML scalars as text."""
        if isinstance(v, (bool, int, float)):
            v = str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("triggers", mode="before")
    @classmethod
    def _default_triggers(cls, v):
        return TriggersConfig() if v is None else v


class GlobalConfig(BaseModel):
    """Global wrapper configuration: all installations known to the host."""

    build_wrapper_enabled: bool = True
    installations: list[SonarInstallation] = Field(default_factory=list)

    def get_installation(self, name: str | None) -> SonarInstallation | None:
        """Find an installation by name.

        An empty name picks the first configured installation, so single-server
        setups need not name it in every job.
        """
        if not name and self.installations:
            return self.installations[0]
        for installation in self.installations:
            if installation.name == name:
                return installation
        return None
