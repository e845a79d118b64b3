"""Semantic validation for the SonarQube environment wrapper."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import GlobalConfig
    from .types import Errors


def semantic_validate(config: GlobalConfig, strict: bool = False) -> Errors:
    """
    Perform semantic validation on a wrapper configuration.

    Args:
        config: The configuration to validate
        strict: Whether to perform strict validation

    Returns:
        A list of validation errors, empty if valid
    """
    errors = []

    errors.extend(validate_installation_names(config))
    errors.extend(validate_server_urls(config))

    # Additional strict validations
    if strict:
        errors.extend(validate_strict_rules(config))

    return errors


def validate_installation_names(config: GlobalConfig) -> Errors:
    """Validate that installation names are unique, and present when several exist."""
    errors = []
    seen_names = set()

    for index, installation in enumerate(config.installations):
        if installation.name is None:
            if len(config.installations) > 1:
                errors.append(f"Installation #{index + 1} must have a name")
            continue
        if installation.name in seen_names:
            errors.append(f"Duplicate installation name: '{installation.name}'")
        else:
            seen_names.add(installation.name)

    return errors


def validate_server_urls(config: GlobalConfig) -> Errors:
    """Validate that server URLs use http or https."""
    errors = []

    for installation in config.installations:
        url = installation.server_url
        if url and not url.startswith(("http://", "https://")):
            errors.append(
                f"Invalid server URL '{url}' for installation '{installation.name}'. "
                f"Must start with http:// or https://"
            )

    return errors


def validate_strict_rules(config: GlobalConfig) -> Errors:
    """
    Perform additional strict validations.

    Rules:
    - Every additional property must be a key=value pair
    - The Maven plugin version must be a single token
    """
    errors = []

    for installation in config.installations:
        for prop in (installation.additional_properties or "").split():
            if "=" not in prop:
                errors.append(
                    f"Additional property '{prop}' for installation '{installation.name}' "
                    f"should be a key=value pair"
                )

        if installation.mojo_version and len(installation.mojo_version.split()) != 1:
            errors.append(
                f"Maven plugin version '{installation.mojo_version}' for installation "
                f"'{installation.name}' must not contain whitespace"
            )

    return errors
