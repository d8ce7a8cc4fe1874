"""Config commands."""

import json
from typing import Any, get_args, get_origin

import rich_click as click
from pydantic import BaseModel, ValidationError
from rich.syntax import Syntax

from ..config import get_config_path, load_config, save_config
from ..models.config import CuratorConfig
from ._console import console


def _field_type(key: str) -> Any:
    """Annotation of the ``CuratorConfig`` field a dotted key points at."""
    model: type[BaseModel] | None = CuratorConfig
    annotation: Any = None
    for part in key.split("."):
        if model is None or part not in model.model_fields:
            raise click.ClickException(f"Unknown config key: {key}")
        annotation = model.model_fields[part].annotation
        model = annotation if isinstance(annotation, type) and issubclass(annotation, BaseModel) else None
    return annotation


def _coerce(annotation: Any, value: str) -> Any:
    """Turn a command-line string into a value of the field's type.

    String fields keep the raw text, ``list[str]`` fields also take
    comma-separated values, everything else is parsed as JSON.
    """
    if get_origin(annotation) is list:
        if get_args(annotation) == (str,) and not value.lstrip().startswith("["):
            return [item.strip() for item in value.split(",") if item.strip()]
    else:
        choices = set(get_args(annotation)) or {annotation}
        if value == "null" and type(None) in choices:
            return None
        if str in choices:
            return value

    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@click.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
def config_show():
    """Show current configuration."""
    cfg = load_config()
    json_str = json.dumps(cfg, indent=2, ensure_ascii=False)
    syntax = Syntax(json_str, "json", theme="monokai")
    console.print(syntax)


@config.command("path")
def config_path():
    """Show configuration file path."""
    console.print(str(get_config_path()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value (e.g., discovery.target_count 20 or tracker.keywords llm,agents)."""
    parsed_value = _coerce(_field_type(key), value)
    cfg = load_config()

    parts = key.split(".")
    target = cfg
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = parsed_value

    try:
        CuratorConfig.from_dict(cfg)
    except ValidationError as e:
        raise click.ClickException(f"Rejected {key}={value!r}:\n{e}") from e

    save_config(cfg)
    console.print(f"Set {key} = {parsed_value!r}")
