"""Type definitions for the SonarQube environment wrapper."""

from dataclasses import dataclass, field

# Constants
MASKED_VALUE = "******"

SONAR_HOST_URL = "SONAR_HOST_URL"
SONAR_CONFIG_NAME = "SONAR_CONFIG_NAME"
SONAR_LOGIN = "SONAR_LOGIN"
SONAR_PASSWORD = "SONAR_PASSWORD"
SONAR_JDBC_URL = "SONAR_JDBC_URL"
SONAR_JDBC_USERNAME = "SONAR_JDBC_USERNAME"
SONAR_JDBC_PASSWORD = "SONAR_JDBC_PASSWORD"
SONAR_MAVEN_GOAL = "SONAR_MAVEN_GOAL"
SONAR_EXTRA_PROPS = "SONAR_EXTRA_PROPS"

# Every variable the wrapper defines, in injection order
SONAR_VARIABLES = (
    SONAR_HOST_URL,
    SONAR_CONFIG_NAME,
    SONAR_LOGIN,
    SONAR_PASSWORD,
    SONAR_JDBC_URL,
    SONAR_JDBC_USERNAME,
    SONAR_JDBC_PASSWORD,
    SONAR_MAVEN_GOAL,
    SONAR_EXTRA_PROPS,
)

# Variables whose values are secrets and never printed in clear
SENSITIVE_VARIABLES = frozenset({SONAR_PASSWORD, SONAR_JDBC_PASSWORD})


# Utility functions
def mask_sensitive_value(value: str | None, is_sensitive: bool) -> str | None:
    """Mask a sensitive value with a placeholder.

    Args:
        value: The value to potentially mask
        is_sensitive: Whether the value should be masked

    Returns:
        The original value if not sensitive or empty, otherwise the mask token
    """
    if not value or not is_sensitive:
        return value
    return MASKED_VALUE


# Type aliases
EnvMap = dict[str, str]
Errors = list[str]
Secrets = list[str]


@dataclass
class RuntimeContext:
    """Everything one build step needs: the resolved env and what to mask."""

    installation_name: str
    env: EnvMap
    secrets: Secrets = field(default_factory=list)
