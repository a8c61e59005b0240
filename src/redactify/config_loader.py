"""
Configuration file loader for redactify.

Supports loading configuration from:
- redactify.toml / .redactify.toml
- redactify.yml / .redactify.yml / redactify.yaml / .redactify.yaml

CLI flags override config file values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from .config import (
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_FILE_BYTES,
    RedactionOptions,
)

# Config file search order (first found wins)
CONFIG_FILE_NAMES = [
    "redactify.toml",
    ".redactify.toml",
    "redactify.yml",
    ".redactify.yml",
    "redactify.yaml",
    ".redactify.yaml",
]

# Pass switches: snake_case field -> accepted spellings in config files
_PASS_KEYS: dict[str, tuple[str, ...]] = {
    "redact_secrets": ("redact_secrets", "redactSecrets", "secrets"),
    "redact_all_classes": ("redact_all_classes", "redactAllClasses", "classes"),
    "redact_all_functions": ("redact_all_functions", "redactAllFunctions", "functions"),
    "redact_all_variables": ("redact_all_variables", "redactAllVariables", "variables"),
    "redact_comments": ("redact_comments", "redactComments", "comments"),
    "redact_strings": ("redact_strings", "redactStrings", "strings"),
    "redact_urls": ("redact_urls", "redactUrls", "urls"),
}


@dataclass
class ProjectConfig:
    """
    Project-level configuration loaded from config files.

    All fields are optional - CLI flags will override any values set here.
    """

    # Pass switches (None = not set in the file)
    passes: dict[str, bool] = field(default_factory=dict)
    language: str | None = None

    # Archive walking
    exclude_globs: set[str] | None = None
    skip_extensions: set[str] | None = None
    max_file_bytes: int | None = None
    max_workers: int | None = None

    # Output
    output_dir: Path | None = None

    # Internal: track which config file was loaded
    _config_file: Path | None = field(default=None, repr=False)

    @property
    def config_file(self) -> Path | None:
        return self._config_file

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (only non-None values, sorted keys)."""
        result: dict[str, Any] = dict(self.passes)

        if self.language is not None:
            result["language"] = self.language
        if self.exclude_globs is not None:
            result["exclude_globs"] = sorted(self.exclude_globs)
        if self.skip_extensions is not None:
            result["skip_extensions"] = sorted(self.skip_extensions)
        if self.max_file_bytes is not None:
            result["max_file_bytes"] = self.max_file_bytes
        if self.max_workers is not None:
            result["max_workers"] = self.max_workers
        if self.output_dir is not None:
            result["output_dir"] = str(self.output_dir)
        if self._config_file is not None:
            result["_loaded_from"] = str(self._config_file)

        return dict(sorted(result.items()))


def find_config_file(root: Path) -> Path | None:
    """
    Find a configuration file in a directory.

    Args:
        root: Directory to search

    Returns:
        Path to the config file, or None if not found
    """
    for name in CONFIG_FILE_NAMES:
        config_path = root / name
        if config_path.exists() and config_path.is_file():
            return config_path
    return None


def _section(data: Any) -> dict[str, Any]:
    """Support both flat documents and a nested [redactify] section."""
    if not isinstance(data, dict):
        return {}
    section = data.get("redactify")
    if isinstance(section, dict):
        return section
    return data


def _parse_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file."""
    with open(path, "rb") as f:
        return _section(tomllib.load(f))


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML config file."""
    with open(path, encoding="utf-8") as f:
        return _section(yaml.safe_load(f))


def _normalize_extensions(extensions: Any) -> set[str] | None:
    """Normalize extension list to set with leading dots."""
    if extensions is None:
        return None

    if isinstance(extensions, str):
        extensions = [e.strip() for e in extensions.split(",")]

    if not isinstance(extensions, (list, set, tuple)):
        return None

    result = set()
    for ext in extensions:
        ext = str(ext).strip().lower()
        if ext:
            if not ext.startswith("."):
                ext = f".{ext}"
            result.add(ext)

    return result if result else None


def _normalize_globs(globs: Any) -> set[str] | None:
    """Normalize glob patterns to set."""
    if globs is None:
        return None

    if isinstance(globs, str):
        globs = [g.strip() for g in globs.split(",")]

    if not isinstance(globs, (list, set, tuple)):
        return None

    result = {str(g).strip() for g in globs if g}
    return result if result else None


def _read_passes(data: dict[str, Any]) -> dict[str, bool]:
    """Collect pass switches from the top level or an ``options`` table."""
    sources = [data]
    if isinstance(data.get("options"), dict):
        sources.append(data["options"])

    passes: dict[str, bool] = {}
    for source in sources:
        for name, spellings in _PASS_KEYS.items():
            for key in spellings:
                if key in source and source[key] is not None:
                    passes[name] = bool(source[key])
    return passes


def load_config(root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load configuration from a config file.

    Args:
        root: Directory searched for a config file
        config_path: Explicit path to config file (optional)

    Returns:
        ProjectConfig with loaded values (unset values remain None)
    """
    if config_path is None:
        config_path = find_config_file(root)

    if config_path is None or not config_path.exists():
        return ProjectConfig()

    suffix = config_path.suffix.lower()
    try:
        if suffix == ".toml":
            data = _parse_toml(config_path)
        elif suffix in (".yml", ".yaml"):
            data = _parse_yaml(config_path)
        else:
            return ProjectConfig()
    except (OSError, ValueError, yaml.YAMLError):
        # Parse errors fall back to defaults - the CLI works without a config
        return ProjectConfig()

    config = ProjectConfig(_config_file=config_path)
    config.passes = _read_passes(data)

    if data.get("language"):
        config.language = str(data["language"]).lower()

    config.exclude_globs = _normalize_globs(data.get("exclude_globs") or data.get("exclude_glob"))
    config.skip_extensions = _normalize_extensions(
        data.get("skip_extensions") or data.get("skip_ext")
    )

    try:
        if "max_file_bytes" in data:
            config.max_file_bytes = int(data["max_file_bytes"])
        if "max_workers" in data:
            config.max_workers = int(data["max_workers"])
    except (TypeError, ValueError):
        pass

    if data.get("output_dir"):
        config.output_dir = Path(data["output_dir"])

    return config


def merge_cli_with_config(
    config: ProjectConfig,
    *,
    # CLI arguments (None / False means not specified on CLI)
    language: str | None = None,
    disabled_passes: set[str] | None = None,
    exclude_glob: str | None = None,
    skip_ext: str | None = None,
    max_file_bytes: int | None = None,
    max_workers: int | None = None,
    output_dir: Path | None = None,
) -> dict[str, Any]:
    """
    Merge CLI arguments with config file values.

    CLI arguments take precedence over config file values, which take
    precedence over the defaults.

    Args:
        config: Loaded project configuration
        language: ``--language`` value
        disabled_passes: Option names switched off by ``--no-*`` flags

    Returns:
        Dictionary with merged values; ``options`` holds a RedactionOptions
    """
    disabled_passes = disabled_passes or set()
    result: dict[str, Any] = {}

    # Pass switches: --no-* wins, then the file, then on
    switches: dict[str, Any] = {}
    for name in _PASS_KEYS:
        if name in disabled_passes:
            switches[name] = False
        else:
            switches[name] = config.passes.get(name, True)

    # Language
    if language:
        switches["language"] = language.lower()
    elif config.language is not None:
        switches["language"] = config.language
    else:
        switches["language"] = DEFAULT_LANGUAGE

    result["options"] = RedactionOptions.from_dict(switches)

    # Exclude globs: CLI overrides config
    if exclude_glob:
        result["exclude_globs"] = _normalize_globs(exclude_glob)
    elif config.exclude_globs is not None:
        result["exclude_globs"] = config.exclude_globs
    else:
        result["exclude_globs"] = None  # Use defaults

    # Skip extensions
    if skip_ext:
        result["skip_extensions"] = _normalize_extensions(skip_ext)
    elif config.skip_extensions is not None:
        result["skip_extensions"] = config.skip_extensions
    else:
        result["skip_extensions"] = None  # Use defaults

    # Max file bytes
    if max_file_bytes is not None:
        result["max_file_bytes"] = max_file_bytes
    elif config.max_file_bytes is not None:
        result["max_file_bytes"] = config.max_file_bytes
    else:
        result["max_file_bytes"] = DEFAULT_MAX_FILE_BYTES

    # Worker threads
    if max_workers is not None:
        result["max_workers"] = max_workers
    elif config.max_workers is not None:
        result["max_workers"] = config.max_workers
    else:
        result["max_workers"] = None  # Sequential

    # Output dir
    if output_dir is not None:
        result["output_dir"] = output_dir
    elif config.output_dir is not None:
        result["output_dir"] = config.output_dir
    else:
        result["output_dir"] = None  # Next to the input

    return result
