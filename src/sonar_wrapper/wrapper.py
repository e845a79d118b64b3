"""Build wrapper that prepares the SonarQube scanner environment for a step."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

from .exceptions import ConfigurationNotFound
from .injectors import SonarEnvironment, secret_values
from .models import GlobalConfig
from .streams import MaskingOutputStream, decorate_logger

if TYPE_CHECKING:
    from .listener import BuildListener


class SonarBuildWrapper:
    """Binds a job to one configured SonarQube installation."""

    display_name = "Prepare SonarQube Scanner environment"

    def __init__(self, installation_name: str | None, config: GlobalConfig | None = None):
        self._installation_name = installation_name
        self.config = config or GlobalConfig()

    @property
    def installation_name(self) -> str | None:
        return self._installation_name

    @installation_name.setter
    def installation_name(self, name: str | None) -> None:
        self._installation_name = name

    def is_applicable(self) -> bool:
        """Whether jobs may use this wrapper at all."""
        return self.config.build_wrapper_enabled

    def set_up(self, listener: BuildListener) -> SonarEnvironment | None:
        """Prepare the step environment.

        Returns None after reporting a fatal error when the job's installation
        is not configured; the step must then not run.
        """
        installation = self.config.get_installation(self._installation_name)
        if installation is None:
            error = ConfigurationNotFound(self._installation_name, len(self.config.installations))
            listener.fatal_error(str(error))
            return None
        return SonarEnvironment(installation, listener)

    def decorate_logger(self, sink: BinaryIO | None) -> MaskingOutputStream | None:
        """Mask the installation's secrets in the step's log."""
        if sink is None:
            return None
        installation = self.config.get_installation(self._installation_name)
        return decorate_logger(sink, secret_values(installation))
