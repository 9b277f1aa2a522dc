"""ConfigManager — resolve server settings from files, environment and profiles.

Precedence, lowest first: built-in defaults, the ``AECDM_ENV`` profile,
``.aecdm/config.json``, ``.env``, process environment.  The profile is
chosen from whatever ``AECDM_ENV`` the explicit layers settle on, so a
``.env`` can switch it as well as the shell.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path

from aecdm.config import DEFAULT_CLASH_THRESHOLD, DEFAULT_GRAPHQL_URL, DEFAULT_TIMEOUT_S

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Setting:
    """One configuration key."""

    key: str
    default: str
    description: str
    secret: bool = False
    numeric: bool = False


SETTINGS: tuple[Setting, ...] = (
    Setting("AECDM_ENV", "development", "Profile: development, testing or production"),
    Setting("AECDM_LOG_LEVEL", "INFO", "Logging level"),
    Setting("AECDM_GRAPHQL_URL", DEFAULT_GRAPHQL_URL, "AEC Data Model GraphQL endpoint"),
    Setting("AECDM_REGION", "", "Optional data region header (US, EMEA, AUS)"),
    Setting("APS_ACCESS_TOKEN", "", "APS bearer token", secret=True),
    Setting("AECDM_TIMEOUT", str(DEFAULT_TIMEOUT_S), "HTTP timeout in seconds", numeric=True),
    Setting("AECDM_GEOMETRY_DIR", "", "Folder of per-element mesh JSON files"),
    Setting("AECDM_IFC_PATH", "", "IFC file used as geometry source"),
    Setting(
        "AECDM_CLASH_THRESHOLD",
        str(DEFAULT_CLASH_THRESHOLD),
        "Default clash volume threshold (cubic model units)",
        numeric=True,
    ),
)

_BY_KEY = {s.key: s for s in SETTINGS}

# Profiles only change defaults; any explicit value still wins.
_PROFILES: dict[str, dict[str, str]] = {
    "development": {"AECDM_LOG_LEVEL": "DEBUG"},
    "testing": {"AECDM_LOG_LEVEL": "DEBUG", "AECDM_TIMEOUT": "5"},
    "production": {"AECDM_LOG_LEVEL": "WARNING"},
}


def _read_json_layer(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Ignoring unreadable %s", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return {str(k): str(v) for k, v in data.items()}


def _read_dotenv_layer(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Ignoring unreadable %s", path, exc_info=True)
        return {}

    values: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):]
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[key] = value
    return values


def _checked_number(setting: Setting, value: str) -> str:
    try:
        number = float(value)
    except ValueError:
        number = math.nan
    if math.isfinite(number) and number >= 0:
        return value
    logger.warning(
        "%s=%r is not a non-negative number, using %s",
        setting.key,
        value,
        setting.default,
    )
    return setting.default


class ConfigManager:
    """Load AECDM server configuration for a project directory."""

    def load_config(self, project_path: str | Path = ".") -> dict[str, str]:
        """Return the merged configuration as a flat ``str -> str`` dict.

        Numeric settings that do not parse as non-negative numbers fall
        back to their defaults with a warning.
        """
        root = Path(project_path)

        explicit: dict[str, str] = {}
        explicit.update(_read_json_layer(root / ".aecdm" / "config.json"))
        explicit.update(_read_dotenv_layer(root / ".env"))
        explicit.update({key: os.environ[key] for key in _BY_KEY if key in os.environ})

        env_name = explicit.get("AECDM_ENV") or _BY_KEY["AECDM_ENV"].default
        profile = _PROFILES.get(env_name)
        if profile is None:
            logger.warning("Unknown AECDM_ENV %r, no profile applied", env_name)
            profile = {}

        config = {s.key: s.default for s in SETTINGS}
        config.update(profile)
        config.update(explicit)
        config["AECDM_ENV"] = env_name

        for setting in SETTINGS:
            if setting.numeric:
                config[setting.key] = _checked_number(setting, config[setting.key])
        return config

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Write ``.env.example`` listing every setting with its default.

        Secrets are left blank.
        """
        env_path = Path(project_path) / ".env.example"
        lines = [
            "# AECDM MCP server settings; copy to .env and edit",
            f"# Profiles for AECDM_ENV: {', '.join(_PROFILES)}",
            "",
        ]
        for setting in SETTINGS:
            value = "" if setting.secret else setting.default
            lines += [f"# {setting.description}", f"{setting.key}={value}", ""]
        env_path.write_text("\n".join(lines), encoding="utf-8")
        return env_path

    def redacted(self, config: dict[str, str]) -> dict[str, str]:
        """Return a copy of *config* with secret values masked for logging."""
        secrets = {s.key for s in SETTINGS if s.secret}
        return {k: ("***" if k in secrets and v else v) for k, v in config.items()}
