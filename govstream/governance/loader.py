"""Governance profile loader for GovStream.

Loads governance profile documents from JSON or YAML files and serves
profile definitions to the redaction stage. The profile is loaded once and
is read-only afterwards, so concurrent readers need no synchronization.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..errors import ProfileLoadError
from .models import GovernanceProfile, ProfileDefinition

logger = logging.getLogger("govstream.governance")

DEFAULT_PROFILE_NAME = "default"
FALLBACK_VERSION = "fallback"


def _parse_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def load_profile_from_file(path: str | Path) -> GovernanceProfile:
    """Load a governance profile document.

    ``.yaml``/``.yml`` files are parsed as YAML, everything else as JSON.

    Args:
        path: Path to the governance document

    Returns:
        GovernanceProfile instance

    Raises:
        ProfileLoadError: If the file cannot be read, parsed or validated
    """
    path = Path(path).expanduser()

    if not path.exists():
        raise ProfileLoadError(f"Governance file not found: {path}")

    if not path.is_file():
        raise ProfileLoadError(f"Governance path is not a file: {path}")

    try:
        data = _parse_document(path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ProfileLoadError(f"Invalid governance document {path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileLoadError(f"Cannot read governance file {path}: {e}")

    if not isinstance(data, dict):
        raise ProfileLoadError("Governance document must contain a mapping")

    try:
        profile = GovernanceProfile.model_validate(data)
    except Exception as e:
        raise ProfileLoadError(f"Invalid governance profile: {e}")

    logger.info(
        f"Loaded governance profile from {path}: v{profile.version} "
        f"({len(profile.logging_profiles)} profiles)"
    )
    return profile


def get_default_profile(profile_name: str = DEFAULT_PROFILE_NAME) -> GovernanceProfile:
    """Get the built-in profile used when no governance file is deployed.

    Args:
        profile_name: Name to register the built-in rules under

    Returns:
        Default GovernanceProfile
    """
    return GovernanceProfile(
        version=FALLBACK_VERSION,
        logging_profiles={
            profile_name: ProfileDefinition(
                disallowed_fields=["ssn", "creditCard", "password", "npi", "pem"],
                field_severities={
                    "password": "Forbidden",
                    "secretValue": "Forbidden",
                    "npi": "Forbidden",
                    "pem": "Forbidden",
                },
                required_fields=["message"],
            ),
        },
    )


def load_profile(
    path: str | Path | None,
    profile_name: str = DEFAULT_PROFILE_NAME,
) -> GovernanceProfile:
    """Load a governance profile, falling back to the built-in default.

    Args:
        path: Path to the governance document (None skips the file)
        profile_name: Active profile name, used to key the default rules

    Returns:
        GovernanceProfile instance (never fails)
    """
    if path is not None:
        try:
            return load_profile_from_file(path)
        except ProfileLoadError as e:
            logger.warning(f"{e}; using built-in default governance profile")
    else:
        logger.info("No governance file configured, using built-in default profile")

    return get_default_profile(profile_name)


class GovernanceProfileStore:
    """Serves the active governance profile for the lifetime of a provider.

    Usage:
        store = GovernanceProfileStore.from_path("governance.json", "default")
        definition = store.get("default")
    """

    def __init__(self, profile: GovernanceProfile):
        self._profile = profile

    @classmethod
    def from_path(
        cls,
        path: str | Path | None,
        profile_name: str = DEFAULT_PROFILE_NAME,
    ) -> GovernanceProfileStore:
        """Create a store from a governance file (or the built-in default)."""
        return cls(load_profile(path, profile_name))

    @property
    def profile(self) -> GovernanceProfile:
        """The loaded governance profile."""
        return self._profile

    @property
    def version(self) -> str:
        """Version of the loaded governance profile."""
        return self._profile.version

    def get(self, profile_name: str) -> ProfileDefinition:
        """Get a profile definition by name.

        Unknown names yield an empty definition (no rules), not an error.
        """
        return self._profile.definition(profile_name)

    def profile_names(self) -> list[str]:
        """List configured profile names."""
        return list(self._profile.logging_profiles)


def save_profile_to_file(profile: GovernanceProfile, path: str | Path) -> None:
    """Save a governance profile as JSON or YAML (by file suffix).

    Args:
        profile: Profile to save
        path: Destination path

    Raises:
        ProfileLoadError: If the file cannot be written
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = profile.model_dump(mode="json", by_alias=True)
    # frozensets dump in arbitrary order
    for definition in data.get("loggingProfiles", {}).values():
        definition["disallowedFields"] = sorted(definition.get("disallowedFields", []))

    try:
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
        logger.info(f"Saved governance profile to {path}")
    except OSError as e:
        raise ProfileLoadError(f"Cannot write governance file: {e}")


# Export functions
__all__ = [
    "DEFAULT_PROFILE_NAME",
    "FALLBACK_VERSION",
    "GovernanceProfileStore",
    "load_profile_from_file",
    "load_profile",
    "get_default_profile",
    "save_profile_to_file",
]
