"""Merge configuration sources into a validated :class:`CvConfig`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterator, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import CvConfig

ENV_PREFIX = "CV__"
_ENV_SEPARATOR = "__"


def resolve_with_precedence(
    *,
    defaults: CvConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> CvConfig:
    """Layer overrides on top of ``defaults`` and validate the result.

    Later sources win: defaults, then the config file, then environment
    variables, then CLI overrides. Any source may use dotted keys
    (``{"commit.empty_commit": "allow"}``) or nested mappings.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """

    merged: Dict[str, Any] = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for label, layer in layers:
        if layer is None:
            continue
        if not isinstance(layer, Mapping):
            raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")
        for dotted, value in _leaves(layer, label=label):
            _set_path(merged, dotted, value, label=label)

    try:
        return CvConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    """Collect ``CV__SECTION__KEY`` variables into a nested override mapping.

    Values are parsed as YAML scalars so ``"false"`` and ``"12"`` become a bool
    and an int; anything that fails to parse is kept as the raw string.
    """

    overrides: Dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split(_ENV_SEPARATOR) if part]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        node = overrides
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[segments[-1]] = value
    return overrides


def flatten_for_env(config: CvConfig) -> Dict[str, str]:
    """Render ``config`` as the environment variables that would reproduce it."""
    flat: Dict[str, str] = {}
    for dotted, value in _leaves(config.model_dump(mode="python"), label="config"):
        name = ENV_PREFIX + _ENV_SEPARATOR.join(part.upper() for part in dotted)
        flat[name] = _render_env_value(value)
    return flat


def _render_env_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


def _leaves(
    mapping: Mapping[str, Any], *, label: str, prefix: Tuple[str, ...] = ()
) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    """Yield ``(path, value)`` for every non-mapping value, expanding dotted keys."""
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        path = prefix + tuple(part for part in key.split(".") if part)
        if not path:
            raise ConfigError(f"{label.capitalize()} override has an empty key.")
        if isinstance(value, Mapping) and value:
            yield from _leaves(value, label=label, prefix=path)
        else:
            yield path, value


def _set_path(target: Dict[str, Any], path: Tuple[str, ...], value: Any, *, label: str) -> None:
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{label.capitalize()} override for {'.'.join(path)} conflicts with a scalar value."
            )
        node = child
    node[path[-1]] = value


__all__ = ["ENV_PREFIX", "flatten_for_env", "overrides_from_env", "resolve_with_precedence"]
