"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import SymtagConfig

ENV_PREFIX = "SYMTAG__"


def resolve_with_precedence(
    *,
    defaults: SymtagConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> SymtagConfig:
    """Merge configuration sources, later sources winning.

    Order: defaults, configuration file, environment, command line. Keys in any
    override mapping may be dotted (``paths.items_root``) or nested mappings.

    Raises:
        ConfigError: If an override is malformed or the result fails validation.
    """
    merged = defaults.model_dump(mode="python")
    sources = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for source_name, source in sources:
        if source is not None:
            merged = _deep_merge(merged, expand_dotted(source, source_name=source_name))

    try:
        return SymtagConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_to_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``SYMTAG__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``true`` and ``10`` keep their types.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_nested(overrides, path, value)
    return overrides


def flatten_for_env(config: SymtagConfig) -> Dict[str, str]:
    """Render the config as ``SYMTAG__SECTION__KEY`` environment variables."""
    flat: Dict[str, str] = {}
    for path, value in _walk(config.model_dump(mode="python"), []):
        env_key = ENV_PREFIX + "__".join(part.upper() for part in path)
        flat[env_key] = "null" if value is None else str(value)
    return flat


def assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating mappings on the way.

    Raises:
        ConfigError: If an intermediate segment already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign {'.'.join(path)}: {segment} is not a section.")
        node = child
    node[path[-1]] = value


def expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    """Return ``source`` with dotted keys expanded into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, source_name=source_name)
        path = key.split(".")
        parent = result
        for segment in path[:-1]:
            parent = parent.setdefault(segment, {})
            if not isinstance(parent, dict):
                raise ConfigError(f"{source_name.capitalize()} override for {key} conflicts.")
        current = parent.get(path[-1])
        if isinstance(value, dict) and isinstance(current, dict):
            value = _deep_merge(current, value)
        parent[path[-1]] = value
    return result


def _walk(data: Mapping[str, Any], prefix: list[str]) -> Iterable[tuple[list[str], Any]]:
    for key, value in data.items():
        if isinstance(value, MappingABC):
            yield from _walk(value, prefix + [str(key)])
        else:
            yield prefix + [str(key)], value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "assign_nested",
    "env_to_overrides",
    "expand_dotted",
    "flatten_for_env",
    "resolve_with_precedence",
]
