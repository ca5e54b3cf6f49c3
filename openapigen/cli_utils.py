"""
CLI utilities for command line reconstruction and spec loading.
"""

from pathlib import Path
from typing import Any

import click
import requests
import yaml

from .errors import SpecLoadError
from .log import get_logger

logger = get_logger("cli")

PROGRAM_NAME = "openapigen"
URL_TIMEOUT = 30


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return PROGRAM_NAME

    if not cli_args:
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME]
    if click_command.name and click_command.name != PROGRAM_NAME:
        cmd_parts.append(click_command.name)

    options = []
    for param in click_command.params:
        if not isinstance(param, click.Option) or param.name not in cli_args:
            continue

        value = cli_args[param.name]
        if value is None or value is False or value == param.default:
            continue

        flag = param.opts[0] if param.opts else f"--{param.name}"
        if param.is_flag:
            options.append(flag)
            continue

        # File paths are shown by name only
        if isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            formatted_value = path_obj.name if path_obj.exists() else str(value)
        else:
            formatted_value = str(value)
        options.extend([flag, formatted_value])

    cmd_parts.extend(options)
    return " ".join(cmd_parts)


def load_spec_file(path: str | Path) -> Any:
    """Parse a JSON or YAML spec file (JSON is a subset of YAML)."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise SpecLoadError(f"Cannot read spec file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Cannot parse spec file {path}: {e}") from e
    logger.debug("Loaded spec from %s", path)
    return document


def load_spec_url(url: str, timeout: float = URL_TIMEOUT) -> Any:
    """Fetch and parse a JSON or YAML spec over HTTP."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SpecLoadError(f"Cannot fetch spec from {url}: {e}") from e
    try:
        document = yaml.safe_load(response.text)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Cannot parse spec from {url}: {e}") from e
    logger.debug("Fetched spec from %s", url)
    return document
