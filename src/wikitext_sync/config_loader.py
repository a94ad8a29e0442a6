"""
YAML configuration discovery and merging for wikitext_sync.

Looks for config files in a few conventional places, supports
``!include`` of sibling YAML files, merges them with "project wins"
semantics and expands ``${VAR}`` / ``${VAR:-default}`` references.

Usage:
    from wikitext_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WIKITEXT_SYNC_CONFIG"
PROJECT_DIR = ".wikitext_sync"

# ${VAR} or ${VAR:-default}
_ENV_REF = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in *value*.

    An unset or empty variable expands to its default, or to ``""`` when
    there is none.  An unterminated ``${`` is kept as is.
    """

    def _expand(match: re.Match) -> str:
        name, default = match.group(1), match.group(2)
        current = os.environ.get(name)
        if current:
            return current
        return default if default is not None else ""

    return _ENV_REF.sub(_expand, value)


def _expand_tree(node: Any) -> Any:
    match node:
        case str():
            return interpolate_env_vars(node)
        case dict():
            return {key: _expand_tree(value) for key, value in node.items()}
        case list():
            return [_expand_tree(item) for item in node]
        case _:
            return node


# ---------------------------------------------------------------------------
# YAML loading with !include
# ---------------------------------------------------------------------------


class IncludeLoader(yaml.SafeLoader):
    """SafeLoader with an ``!include`` tag.

    Included paths resolve relative to the including file.  The chain of
    files being loaded is tracked to reject include cycles.
    """

    chain: tuple[Path, ...] = ()


def _construct_include(loader: IncludeLoader, node: yaml.ScalarNode) -> Any:
    relative = Path(loader.construct_scalar(node))
    base = Path(loader.name).resolve().parent
    target = (relative if relative.is_absolute() else base / relative).resolve()

    if target in loader.chain:
        cycle = " -> ".join(str(p) for p in (*loader.chain, target))
        raise ValueError(f"Circular include detected: {cycle}")
    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} (referenced from {loader.name})"
        )
    return load_yaml(target, _chain=loader.chain)


IncludeLoader.add_constructor("!include", _construct_include)


def load_yaml(path: Path, *, _chain: tuple[Path, ...] = ()) -> Any:
    """Parse one YAML file, following ``!include`` tags."""
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = IncludeLoader(fh)
        loader.chain = (*_chain, path)
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config files, highest precedence first.

    Search order:
        1. ``WIKITEXT_SYNC_CONFIG`` env var (explicit path)
        2. ``.wikitext_sync/config.yml`` in CWD
        3. ``.wikitext_sync/config.yaml`` in CWD
        4. ``~/.config/wikitext_sync/config.yml``
    """
    candidates: list[Path] = []

    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        candidates.append(Path(explicit).expanduser().resolve())

    project = Path.cwd() / PROJECT_DIR
    candidates.append(project / "config.yml")
    candidates.append(project / "config.yaml")
    candidates.append(Path.home() / ".config" / "wikitext_sync" / "config.yml")

    return [p for p in candidates if p.exists()]


_STARTER_CONFIG = """\
# wikitext-sync configuration
#
# Connection settings can also be set via environment variables:
#   WIKITEXT_HOST, WIKITEXT_PROTOCOL, WIKITEXT_API_PATH, WIKITEXT_COOKIE_FILE
#
# wiki:
#   host: en.wikipedia.org
#   transfer_protocol: https://
#   api_path: /w/api.php
#   cookie_file: ${HOME}/.wikitext_sync/cookies.txt
#   language: en
#   redirects: true
#   skip_title_prompt: false
#   article_path: /wiki/
#   get_css: false
#   preview_css: "body { max-width: 60em; }"
#
# cite:
#   archive: true
#   title_selectors:
#     - "//meta[@name='citation_title']|content"
#
# logging:
#   level: INFO
#   file: null
#   format: text
"""


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a commented starter if none exists.

    Args:
        target: Where to create the starter; defaults to
            ``CWD / .wikitext_sync / config.yml``.
    """
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    path = target or Path.cwd() / PROJECT_DIR / "config.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", path)
    return path


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge every discovered config file.

    Files are applied from lowest precedence to highest; top-level
    sections of a later file replace earlier ones wholesale.  Env var
    references are expanded after merging.

    Returns an empty dict when no config files exist.
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found; using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = load_yaml(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s); skipping",
                path,
                type(data).__name__,
            )

    return _expand_tree(merged)
