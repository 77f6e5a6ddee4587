"""
Configuration for mdtokens.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/mdtokens/config.toml) if exists
3. Environment variables (MDTOKENS_*) override file
4. CLI flags override everything
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class TokensConfig:
    """Tree walker settings."""
    collapsible_types: list[str] = field(default_factory=lambda: ["paragraph"])  # dissolved when emptied


@dataclass
class MarkdownConfig:
    """markdown-it-py parser settings."""
    preset: str = "commonmark"
    extensions: list[str] = field(default_factory=lambda: ["table", "strikethrough"])


@dataclass
class OutputConfig:
    """CLI output settings."""
    format: str = "markdown"  # markdown, json or tokens
    indent: int = 2


@dataclass
class Config:
    """Root config with all settings."""
    tokens: TokensConfig = field(default_factory=TokensConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "mdtokens" / "config.toml"
    return Path.home() / ".config" / "mdtokens" / "config.toml"


def load_config() -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning("Ignoring config file %s: %s", path, e)
            config = Config()

    # env var overrides
    config = _apply_env(config)

    return config


def _split_list(value: str | list) -> list[str]:
    """Accept a TOML list or a comma separated string."""
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "tokens" in data:
        t = data["tokens"]
        if "collapsible_types" in t:
            config.tokens.collapsible_types = _split_list(t["collapsible_types"])

    if "markdown" in data:
        m = data["markdown"]
        if "preset" in m:
            config.markdown.preset = str(m["preset"])
        if "extensions" in m:
            config.markdown.extensions = _split_list(m["extensions"])

    if "output" in data:
        o = data["output"]
        if "format" in o:
            config.output.format = str(o["format"])
        if "indent" in o:
            config.output.indent = int(o["indent"])

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str, type]] = {
        "MDTOKENS_COLLAPSIBLE_TYPES": ("tokens", "collapsible_types", list),
        "MDTOKENS_MARKDOWN_PRESET": ("markdown", "preset", str),
        "MDTOKENS_MARKDOWN_EXTENSIONS": ("markdown", "extensions", list),
        "MDTOKENS_OUTPUT_FORMAT": ("output", "format", str),
        "MDTOKENS_OUTPUT_INDENT": ("output", "indent", int),
    }

    for env_key, (section, attr, conv) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(ValueError, AttributeError):
                # Lists are comma separated: "paragraph,heading"
                converted = _split_list(val) if conv is list else conv(val)
                setattr(getattr(config, section), attr, converted)

    return config


# Module-level config instance, loaded once on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
