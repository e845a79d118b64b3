"""SonarQube environment wrapper exceptions."""


class SonarWrapperError(Exception):
    """Base class for all wrapper errors."""


class ConfigurationNotFound(SonarWrapperError):
    """Raised when a job names an installation that is not configured.

    Fatal for the build step: the host reports it and does not run the step.
    """

    def __init__(self, installation_name: str | None, available: int = 0):
        self.installation_name = installation_name
        self.available = available
        super().__init__(
            f"SonarQube installation defined in this job ({installation_name}) "
            f"does not match any configured installation. "
            f"Number of installations that can be configured: {available}."
        )


class ConfigurationLoadError(SonarWrapperError):
    """Raised when a configuration file cannot be read or fails validation."""
