"""
Preview configuration loading.

Packaged defaults live in texpreview/config/preview_defaults.yaml. A user YAML
file (TEXPREVIEW_CONFIG_PATH or an explicit path) and in-code overrides are
merged on top, later sources winning.

Examples:
    >>> config = load_preview_config()
    >>> config["environments"]["reference_width_cm"]
    21.0

    >>> config = load_preview_config(overrides={"math": {"font_size": 14}})
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

load_dotenv()
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "preview_defaults.yaml"
USER_CONFIG_PATH = os.getenv("TEXPREVIEW_CONFIG_PATH")


class PreviewConfigError(ValueError):
    """Raised when a configuration file is missing, unreadable or has unknown keys."""

    pass


def load_preview_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load preview settings as a plain dict.

    Args:
        config_path: Optional user YAML (defaults to TEXPREVIEW_CONFIG_PATH when set)
        overrides: Optional nested dict applied last

    Returns:
        Resolved configuration dict

    Raises:
        PreviewConfigError: If the user file is missing or sets keys the defaults don't define
    """
    defaults = OmegaConf.load(DEFAULT_CONFIG_PATH)
    # Struct mode rejects keys that are not in the defaults
    OmegaConf.set_struct(defaults, True)

    sources = [defaults]

    if config_path is None and USER_CONFIG_PATH:
        config_path = Path(USER_CONFIG_PATH)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise PreviewConfigError(f"Config file not found: {config_path}")
        try:
            sources.append(OmegaConf.load(config_path))
        except (OmegaConfBaseException, OSError) as e:
            raise PreviewConfigError(f"Could not read config file {config_path}: {e}") from e

    if overrides:
        sources.append(OmegaConf.create(overrides))

    try:
        merged = OmegaConf.merge(*sources)
    except OmegaConfBaseException as e:
        raise PreviewConfigError(f"Invalid preview configuration: {e}") from e

    return OmegaConf.to_container(merged, resolve=True)
