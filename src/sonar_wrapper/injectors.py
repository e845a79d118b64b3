"""Resolution of a SonarQube installation into injected environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .exceptions import ConfigurationNotFound
from .token_engine import TokenEngine
from .types import (
    SONAR_CONFIG_NAME,
    SONAR_EXTRA_PROPS,
    SONAR_HOST_URL,
    SONAR_JDBC_PASSWORD,
    SONAR_JDBC_URL,
    SONAR_JDBC_USERNAME,
    SONAR_LOGIN,
    SONAR_MAVEN_GOAL,
    SONAR_PASSWORD,
)

if TYPE_CHECKING:
    from .listener import BuildListener
    from .models import GlobalConfig, SonarInstallation
    from .types import EnvMap, Secrets

DEFAULT_SERVER_URL = "http://localhost:9000"
DEFAULT_DATABASE_PASSWORD = "sonar"
DEFAULT_GOAL = "sonar:sonar"
MOJO_GOAL_TEMPLATE = "org.codehaus.mojo:sonar-maven-plugin:{version}:sonar"
DEBUG_FLAG = "-X"


def maven_goal(installation: SonarInstallation) -> str:
    """Return the Maven goal, pinned to the plugin version when one is set."""
    if installation.mojo_version:
        return MOJO_GOAL_TEMPLATE.format(version=installation.mojo_version)
    return DEFAULT_GOAL


def extra_properties(installation: SonarInstallation) -> str:
    """Build the extra scanner arguments.

    Each ``key=value`` property becomes ``-Dkey=value``. Additional arguments
    follow verbatim, and the debug flag always closes the list, moved to the
    end when the arguments already carry it.
    """
    tokens = []
    for prop in (installation.additional_properties or "").split():
        tokens.append(prop if prop.startswith("-D") else f"-D{prop}")
    tokens.extend(arg for arg in (installation.additional_args or "").split() if arg != DEBUG_FLAG)
    tokens.append(DEBUG_FLAG)
    return " ".join(tokens)


def _defined_values(installation: SonarInstallation) -> EnvMap:
    """First pass: the raw value of every variable, before expansion."""
    return {
        SONAR_HOST_URL: installation.server_url or DEFAULT_SERVER_URL,
        SONAR_CONFIG_NAME: installation.name or "",
        SONAR_LOGIN: installation.sonar_login or "",
        SONAR_PASSWORD: installation.sonar_password or "",
        SONAR_JDBC_URL: installation.database_url or "",
        SONAR_JDBC_USERNAME: installation.database_login or "",
        SONAR_JDBC_PASSWORD: installation.database_password or "",
        SONAR_MAVEN_GOAL: maven_goal(installation),
        SONAR_EXTRA_PROPS: extra_properties(installation),
    }


def resolve(installation: SonarInstallation, existing_env: EnvMap | None = None) -> EnvMap:
    """Resolve an installation into a new environment mapping.

    The defined variables are laid over a copy of ``existing_env`` first, and
    only then expanded against that assembled mapping. A login of
    ``$SONAR_CONFIG_NAME`` therefore resolves to the installation name even
    though the name is defined in the same pass. ``existing_env`` is never
    modified.
    """
    defined = _defined_values(installation)

    assembled = dict(existing_env or {})
    assembled.update(defined)

    token_engine = TokenEngine(dict(assembled))
    for key, raw in defined.items():
        assembled[key] = token_engine.expand(raw)

    return assembled


def resolve_installation(
    config: GlobalConfig, name: str | None, existing_env: EnvMap | None = None
) -> EnvMap:
    """Look up ``name`` and resolve it, failing before any work when unknown."""
    installation = config.get_installation(name)
    if installation is None:
        raise ConfigurationNotFound(name, len(config.installations))
    return resolve(installation, existing_env)


def secret_values(installation: SonarInstallation | None, env: EnvMap | None = None) -> Secrets:
    """Return the values that must never show up in a build log.

    With ``env`` given, references in the configured passwords are expanded
    first, so the secret is masked as the build actually sees it.
    """
    if installation is None:
        return []

    candidates = [
        installation.sonar_password,
        installation.database_password or DEFAULT_DATABASE_PASSWORD,
    ]
    token_engine = TokenEngine(env) if env is not None else None

    secrets: Secrets = []
    for value in candidates:
        if value and token_engine is not None:
            value = token_engine.expand(value)
        if value and value not in secrets:
            secrets.append(value)
    return secrets


class SonarEnvironment:
    """Contributes the SonarQube variables to a running build's environment."""

    def __init__(self, installation: SonarInstallation, listener: BuildListener):
        self.installation = installation
        self.listener = listener
        self._resolved: EnvMap | None = None

    def build_env_vars(self, env: EnvMap) -> None:
        """Merge the resolved variables into ``env`` in place."""
        self.listener.info(
            "Injecting SonarQube environment variables using the configuration: "
            f"{self.installation.name}"
        )
        self._resolved = resolve(self.installation, env)
        env.update(self._resolved)

    @property
    def secrets(self) -> Secrets:
        """Secrets to mask, expanded once the environment has been built."""
        return secret_values(self.installation, self._resolved)
