"""
Environment configuration loader.

Reads ``LOUVAIN_*`` variables, optionally from a .env file, to build default
run options without mutating any process-wide state of the library.
"""
import logging
import os
from collections import ChainMap
from pathlib import Path
from typing import Mapping, Optional

from .config import (
    COMMUNITY_ATTRIBUTE,
    DELTA_COMPUTATION,
    FAST_LOCAL_MOVES,
    RANDOM_WALK,
    RESOLUTION,
    WEIGHT_ATTRIBUTE,
    WEIGHTED,
    LouvainOptions,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOUVAIN_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def load_env_file(env_path: Path) -> dict:
    """
    Read variables from a .env file.

    The process environment is left untouched: callers layer the returned
    values under it.

    Parameters
    ----------
    env_path : Path
        Path to the .env file

    Returns
    -------
    dict
        Dictionary of variables read from the file
    """
    env_path = Path(env_path)
    loaded = {}

    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue
            if '=' in line:
                key, value = line.split('=', 1)
                loaded[key.strip()] = value.strip()

    return loaded


def get_env(key: str, default: str = None, environ: Optional[Mapping[str, str]] = None) -> str:
    """Get a ``LOUVAIN_`` variable with optional default, from ``os.environ`` unless given."""
    if environ is None:
        environ = os.environ
    return environ.get(ENV_PREFIX + key, default)


def get_env_bool(key: str, default: bool, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Get a ``LOUVAIN_`` variable as a boolean."""
    value = get_env(key, environ=environ)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{key} must be a boolean, got {value!r}")


def get_env_float(key: str, default: float, environ: Optional[Mapping[str, str]] = None) -> float:
    """Get a ``LOUVAIN_`` variable as a float."""
    value = get_env(key, environ=environ)
    if value is None:
        return default
    return float(value)


def options_from_env(env_path: Optional[Path] = None) -> LouvainOptions:
    """
    Build default options from the environment.

    Recognized variables: ``LOUVAIN_COMMUNITY_ATTRIBUTE``,
    ``LOUVAIN_WEIGHT_ATTRIBUTE``, ``LOUVAIN_WEIGHTED``,
    ``LOUVAIN_RESOLUTION``, ``LOUVAIN_DELTA_COMPUTATION``,
    ``LOUVAIN_FAST_LOCAL_MOVES``, ``LOUVAIN_RANDOM_WALK`` and
    ``LOUVAIN_SEED``.

    Parameters
    ----------
    env_path : Path, optional
        .env file read under the process environment, which takes
        precedence

    Returns
    -------
    options : LouvainOptions
    """
    environ = os.environ
    if env_path is not None:
        environ = ChainMap(os.environ, load_env_file(env_path))

    seed = get_env("SEED", environ=environ)

    options = LouvainOptions(
        community_attribute=get_env("COMMUNITY_ATTRIBUTE", COMMUNITY_ATTRIBUTE, environ),
        weight_attribute=get_env("WEIGHT_ATTRIBUTE", WEIGHT_ATTRIBUTE, environ),
        weighted=get_env_bool("WEIGHTED", WEIGHTED, environ),
        resolution=get_env_float("RESOLUTION", RESOLUTION, environ),
        delta_computation=get_env("DELTA_COMPUTATION", DELTA_COMPUTATION.value, environ),
        fast_local_moves=get_env_bool("FAST_LOCAL_MOVES", FAST_LOCAL_MOVES, environ),
        random_walk=get_env_bool("RANDOM_WALK", RANDOM_WALK, environ),
        rng=int(seed) if seed is not None else None,
    )
    logger.debug("Louvain options from environment: %s", describe_options(options))
    return options


def describe_options(options: LouvainOptions) -> str:
    """One-line description of the options, for logs."""
    return (
        f"resolution={options.resolution} "
        f"delta={options.delta_computation.value} "
        f"weighted={options.weighted} "
        f"fast_local_moves={options.fast_local_moves} "
        f"random_walk={options.random_walk} "
        f"seeded={options.rng is not None}"
    )
