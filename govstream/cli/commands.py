"""CLI commands for operating governed log files.

Provides commands for:
- Running one rotation pass over the configured sink files
- Decoding an encoded fallback file back to JSON lines
- Inspecting the governance profile that would be loaded
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from ..errors import ConfigError
from ..governance.loader import GovernanceProfileStore
from ..pipeline.config import PipelineConfig
from ..pipeline.rotation import RotationManager
from ..pipeline.sinks import decode_fallback_line


def _load_config(config_path: str | None) -> PipelineConfig:
    """Load pipeline config from a settings file, or from the environment."""
    if config_path:
        return PipelineConfig.from_file(config_path)

    from ..config.settings import get_settings

    return get_settings().to_pipeline_config()


def cmd_rotate(config_path: str | None = None, json_output: bool = False) -> int:
    """Rotate sink files that exceed the configured thresholds.

    Args:
        config_path: Settings file (environment settings if None)
        json_output: Output as JSON

    Returns:
        Exit code (0 for success)
    """
    try:
        config = _load_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    rotated = RotationManager().rotate_all(config.sink_paths, config.rotation)

    if json_output:
        print(json.dumps({str(k): str(v) for k, v in rotated.items()}, indent=2))
    elif not rotated:
        print("No files needed rotation.")
    else:
        for path, archive in rotated.items():
            print(f"Rotated {path} -> {archive}")
    return 0


def cmd_decode(path: str, skip_invalid: bool = False) -> int:
    """Decode an encoded fallback file, printing one JSON record per line.

    Args:
        path: Fallback file
        skip_invalid: Skip lines that are not encoded records

    Returns:
        Exit code (0 for success)
    """
    source = Path(path)
    if not source.is_file():
        print(f"Error: file not found: {source}", file=sys.stderr)
        return 1

    with open(source, encoding="utf-8") as f:
        for number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = decode_fallback_line(line)
            except ValueError as e:
                if skip_invalid:
                    continue
                print(f"Error: line {number}: {e}", file=sys.stderr)
                return 1
            print(json.dumps(record, ensure_ascii=False))
    return 0


def cmd_profile(
    governance_path: str | None = None,
    profile_name: str | None = None,
    config_path: str | None = None,
    json_output: bool = False,
) -> int:
    """Show the governance profile the pipeline would load.

    Args:
        governance_path: Governance document (configured path if None)
        profile_name: Profile to show (configured profile if None)
        config_path: Settings file (environment settings if None)
        json_output: Output as JSON

    Returns:
        Exit code (0 for success)
    """
    try:
        config = _load_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    name = profile_name or config.governance_profile
    store = GovernanceProfileStore.from_path(governance_path or config.governance_config_path, name)
    definition = store.get(name)

    if json_output:
        data = {
            "version": store.version,
            "profile": name,
            "profiles": store.profile_names(),
            "disallowedFields": sorted(definition.disallowed_fields),
            "fieldSeverities": definition.field_severities,
            "requiredFields": list(definition.required_fields),
        }
        print(json.dumps(data, indent=2))
        return 0

    print(f"Governance version: {store.version}")
    print(f"Profiles: {', '.join(store.profile_names()) or '(none)'}")
    print(f"Active profile: {name}")
    if definition.is_empty:
        print("  (no rules)")
        return 0
    print(f"  Disallowed: {', '.join(sorted(definition.disallowed_fields)) or '-'}")
    for field_name, severity in definition.field_severities.items():
        print(f"  Severity: {field_name} = {severity}")
    print(f"  Required: {', '.join(definition.required_fields) or '-'}")
    return 0


__all__ = ["cmd_rotate", "cmd_decode", "cmd_profile"]
