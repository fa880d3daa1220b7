"""Loading ``config.yaml`` with ``${VAR}`` placeholders filled from the environment."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.savemate.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve_placeholder(match: re.Match[str]) -> str:
    expression = match.group(1)

    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    if ":?" in expression:
        name, message = expression.split(":?", 1)
    else:
        name, message = expression, "not set"

    value = os.getenv(name)
    if value is None:
        raise ValueError(f"Required environment variable {name} {message}")
    return value


def substitute_env_vars(text: str) -> str:
    """Replace ``${NAME}``, ``${NAME:-default}`` and ``${NAME:?message}`` in ``text``.

    Raises:
        ValueError: A placeholder without a default names an unset variable.
    """
    return _PLACEHOLDER.sub(_resolve_placeholder, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Copy ``<ENV>_NAME`` variables to ``NAME`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    promoted = sorted(name for name in os.environ if name.startswith(prefix))
    for name in promoted:
        os.environ[name[len(prefix):]] = os.environ[name]
    if promoted:
        # values may be secrets
        logger.info("Applied {} overrides: {}", env_mode, promoted)


def load_templated_yaml(file_path: Path, env_mode: str = "development") -> ConfigData:
    """Read ``file_path``, substitute placeholders and validate the ``config`` section.

    Raises:
        ValueError: A required variable is missing, the YAML is malformed, or
            the resulting configuration does not validate.
    """
    logger.info("Loading configuration from {} ({})", file_path, env_mode)
    raw = Path(file_path).read_text(encoding="utf-8")
    apply_environment_overrides(env_mode)

    try:
        document = yaml.safe_load(substitute_env_vars(raw))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(document, dict):
        raise ValueError(f"{file_path} does not contain a mapping")

    try:
        return ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
