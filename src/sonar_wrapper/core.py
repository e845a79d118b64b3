"""Core functionality for the SonarQube environment wrapper."""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationLoadError, ConfigurationNotFound
from .injectors import DEFAULT_DATABASE_PASSWORD, resolve, secret_values
from .models import GlobalConfig
from .providers import load_base_env
from .streams import decorate_logger, mask_text
from .types import (
    SENSITIVE_VARIABLES,
    SONAR_VARIABLES,
    EnvMap,
    RuntimeContext,
    mask_sensitive_value,
)


@dataclass
class ExecutionResult:
    """Result of process execution."""

    exit_code: int
    duration_s: float


def load_config(path: Path) -> GlobalConfig:
    """Load the YAML wrapper configuration from file."""
    try:
        data = yaml.safe_load(Path(path).read_text())
    except OSError as e:
        raise ConfigurationLoadError(f"Cannot read configuration {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationLoadError(f"Invalid YAML in {path}: {e}") from e

    try:
        return GlobalConfig(**(data or {}))
    except (TypeError, ValidationError) as e:
        raise ConfigurationLoadError(f"Invalid configuration in {path}: {e}") from e


def build_runtime_context(
    config: GlobalConfig,
    installation_name: str | None,
    *,
    env: EnvMap | None = None,
    env_files: Sequence[Path] = (),
) -> RuntimeContext:
    """Resolve an installation against the host environment for one step."""
    installation = config.get_installation(installation_name)
    if installation is None:
        raise ConfigurationNotFound(installation_name, len(config.installations))

    resolved = resolve(installation, load_base_env(env, env_files))
    return RuntimeContext(
        installation_name=installation.name or "",
        env=resolved,
        secrets=secret_values(installation, resolved),
    )


def execute(
    context: RuntimeContext,
    command: Sequence[str],
    sink: BinaryIO,
    *,
    working_dir: Path | None = None,
) -> ExecutionResult:
    """Run ``command`` with the resolved env, masking secrets in its output.

    Stderr is merged into stdout so the log keeps the child's own ordering.
    """
    start_time = time.time()

    stream = decorate_logger(sink, context.secrets)
    try:
        with subprocess.Popen(
            list(command),
            cwd=working_dir,
            env=context.env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        ) as process:
            try:
                while True:
                    chunk = process.stdout.read1(4096)
                    if not chunk:
                        break
                    stream.write(chunk)
            except BaseException:
                # Nothing reads the pipe any more
                process.kill()
                raise
            exit_code = process.wait()
    finally:
        stream.close()

    return ExecutionResult(exit_code=exit_code, duration_s=time.time() - start_time)


def describe(context: RuntimeContext) -> dict:
    """Machine-readable summary of the injected variables, secrets masked.

    The fallback database password is masked in build logs only, never in the
    values shown here, unless it is also a configured password.
    """
    passwords = {context.env.get(name, "") for name in SENSITIVE_VARIABLES}
    secrets = [
        secret
        for secret in context.secrets
        if secret != DEFAULT_DATABASE_PASSWORD or secret in passwords
    ]

    variables = {}
    for name in SONAR_VARIABLES:
        value = context.env.get(name, "")
        masked = mask_sensitive_value(value, name in SENSITIVE_VARIABLES)
        variables[name] = mask_text(masked, secrets)

    return {
        "installation": context.installation_name,
        "variables": variables,
        "masked_count": len(context.secrets),
        "env_keys": len(context.env),
    }
