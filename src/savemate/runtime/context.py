"""The active configuration, held in a context variable.

The CLI, the app factory and the services all read configuration through
``get_config()``. Tests swap it with ``with_context`` or ``set_config``.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel

from src.savemate.runtime.config.config_data import ConfigData
from src.savemate.runtime.config.config_template import load_templated_yaml
from src.savemate.runtime.settings import EnvironmentVariables


@dataclass
class AppContext:
    config: ConfigData


def load_default_config() -> ConfigData:
    """Load config.yaml (or the file named by APP_CONFIG_FILE), falling back to defaults."""
    env = EnvironmentVariables()
    path = Path(env.config_file)
    if not path.exists():
        logger.warning("Configuration file {} not found; using defaults", path)
        return ConfigData.model_validate({"app": {"environment": env.environment}})

    config = load_templated_yaml(path, env_mode=env.environment)
    if "environment" not in config.app.model_fields_set:
        config.app.environment = env.environment
    return config


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def _explicit_fields(model: BaseModel) -> dict[str, Any]:
    """Dump only the fields that were set explicitly, descending into nested models.

    A nested model that was passed in whole but has no explicit fields of its
    own is dumped completely.
    """
    explicit: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                explicit[name] = nested
            elif name in model.model_fields_set:
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily layer ``config_override`` over the active configuration.

    Only fields set explicitly on the override replace current values:

        with with_context(ConfigData(catalog=CatalogConfig(hide_expired=False))):
            assert get_config().catalog.hide_expired is False
    """
    if config_override is None:
        yield
        return
    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    current = get_context()
    merged = _deep_merge(current.config.model_dump(), _explicit_fields(config_override))
    token = set_context(replace(current, config=ConfigData.model_validate(merged)))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the active configuration outright."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
