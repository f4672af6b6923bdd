"""
Random symbol grid generation.

Every cell is an independent uniform draw, with replacement, from the
machine's full symbol pool.  No reel strips, no weighting; duplicates
within a row or across rows are expected.

The random source is a ``numpy.random.Generator`` owned by the generator
instance (or passed per call), never module-global state, so concurrent
machines do not contend and a seed reproduces a grid exactly.
"""

import logging
import os
from typing import Optional

import numpy as np

from slot_engine.core.errors import ConfigurationError
from slot_engine.core.machine_config import Grid, MachineConfig
from slot_engine.core.providers import SymbolPoolProvider

logger = logging.getLogger(__name__)

#: Development seed variable; unset in production so every process draws fresh entropy.
SEED_ENV_VAR = "SLOT_RNG_SEED"


def env_seed() -> Optional[int]:
    """Return the ``SLOT_RNG_SEED`` value as an int, or ``None`` when unset.

    Raises:
        ConfigurationError: If the variable is set but is not an integer.
    """
    raw = os.getenv(SEED_ENV_VAR, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{SEED_ENV_VAR} must be an integer, got {raw!r}."
        ) from None


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Return a fresh generator, falling back to ``SLOT_RNG_SEED`` when no seed is given.

    The variable is read on every call.  While it is set, every machine
    built without an explicit generator replays the same sequence; pass a
    distinct ``seed`` or generator per machine when that matters.
    """
    return np.random.default_rng(seed if seed is not None else env_seed())


class GridGenerator:
    """Draws ``rows × columns`` grids from a symbol pool."""

    def __init__(
        self,
        config: MachineConfig,
        symbol_pool: SymbolPoolProvider,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config
        self.symbol_pool = symbol_pool
        self.rng = rng if rng is not None else make_rng()

    def random_grid(self, rng: Optional[np.random.Generator] = None) -> Grid:
        """
        Draw one grid.

        Args:
            rng: Optional generator for this call only.  Defaults to the
                instance generator.

        Raises:
            ConfigurationError: If the symbol pool is empty.
        """
        pool = self.symbol_pool.symbols()
        if not pool:
            raise ConfigurationError(
                f"Cannot draw a grid for {self.config!r}: symbol pool is empty."
            )

        rng = rng if rng is not None else self.rng
        picks = rng.integers(0, len(pool), size=(self.config.rows, self.config.columns))
        grid = tuple(tuple(pool[int(i)] for i in row) for row in picks)

        logger.debug(
            "Drew %dx%d grid for machine %s from %d symbols",
            self.config.rows, self.config.columns,
            self.config.machine_id, len(pool),
        )
        return grid
