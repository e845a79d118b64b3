"""Providers for the base environment a build step starts from."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Protocol

if TYPE_CHECKING:
    from .types import EnvMap


class ProviderProtocol(Protocol):
    """Protocol for environment providers."""

    def load(self) -> EnvMap:
        """Load environment values."""
        ...


class EnvProvider:
    """Host process environment provider."""

    def __init__(self, env: EnvMap | None = None):
        self.env = env

    def load(self) -> EnvMap:
        """Return a copy of the given env, or of the process environment."""
        if self.env is None:
            return dict(os.environ)
        return dict(self.env)


class DotenvProvider:
    """Dotenv file provider."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> EnvMap:
        """Load the dotenv file, or nothing if it does not exist."""
        from dotenv import dotenv_values

        if not self.path.exists():
            return {}

        env_values = dotenv_values(self.path)
        return {k: str(v) for k, v in env_values.items() if v is not None}


def load_base_env(env: EnvMap | None = None, env_files: Iterable[Path | str] = ()) -> EnvMap:
    """Build the host environment, with each dotenv file overlaid in order."""
    providers: list[ProviderProtocol] = [EnvProvider(env)]
    providers.extend(DotenvProvider(path) for path in env_files)

    merged: EnvMap = {}
    for provider in providers:
        merged.update(provider.load())
    return merged
