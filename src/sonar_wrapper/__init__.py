"""SonarQube Environment Wrapper - inject scanner settings into builds and mask their secrets."""

__version__ = "0.1.0"

from .models import GlobalConfig, SonarInstallation, TriggersConfig
from .core import build_runtime_context, execute, load_config
from .injectors import SonarEnvironment, resolve, resolve_installation, secret_values
from .streams import MaskingOutputStream, decorate_logger
from .wrapper import SonarBuildWrapper

__all__ = [
    "GlobalConfig",
    "SonarInstallation",
    "TriggersConfig",
    "build_runtime_context",
    "execute",
    "load_config",
    "SonarEnvironment",
    "resolve",
    "resolve_installation",
    "secret_values",
    "MaskingOutputStream",
    "decorate_logger",
    "SonarBuildWrapper",
]
