"""config.py - Shared Limits and Rates

Each value below may be overridden by an environment variable named
:code:`SPACE_TREE_<NAME>`. Functions taking one of these values also accept it as
a keyword argument, so the constants only act as defaults.
"""
from __future__ import annotations

import typing as typ

import logging
import os

__all__ = ['env_override', 'LOGGER_NAME','WORLD_FRAME', 'MAX_TRANSFORM_CHAIN', 'MAX_RECURSION_DEPTH',
           'BUFFER_MAINTAIN_RATE', 'VISUALIZE_REFRESH_RATE']

logger = logging.getLogger(__name__)

ENV_PREFIX = 'SPACE_TREE_'

# %% Environment
def env_override(name: str, default: typ.Any, cast: typ.Callable[[str], typ.Any]) -> typ.Any:
    """Reads the override of a constant from the environment

    :param name: Variable suffix, read as :code:`SPACE_TREE_<name>`
    :type name: str

    :param default: Value kept when the variable is unset or cannot be cast
    :type default: typing.Any

    :param cast: Conversion of the raw string
    :type cast: typing.Callable[[str], typing.Any]

    :return: Overridden or default value
    :rtype: typing.Any
    """
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default

    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r, using %r.", ENV_PREFIX, name, raw, default)
        return default

# %% Constants
LOGGER_NAME: str = 'space_tree'

# Reserved frame name, also the default lookup root
WORLD_FRAME: str = 'world'

# Step caps of the path searches and of the tree rendering
MAX_TRANSFORM_CHAIN: int = env_override('MAX_TRANSFORM_CHAIN', 1000, int)
MAX_RECURSION_DEPTH: int = env_override('MAX_RECURSION_DEPTH', 1000, int)

# Seconds
BUFFER_MAINTAIN_RATE: float = env_override('MAINTAIN_RATE', 0.01, float)
VISUALIZE_REFRESH_RATE: float = env_override('VISUALIZE_RATE', 0.1, float)
