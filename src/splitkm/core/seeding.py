from __future__ import annotations

import os
import random
from typing import Optional

import numpy as np


def seed_everything(seed: int = 42) -> None:
    """
    Deterministic seeds for Python and NumPy's legacy global state.
    """
    random.seed(seed)
    np.random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Fresh Generator. None draws entropy from the OS, like srand(time(NULL)) in old drivers.
    """
    return np.random.default_rng(seed)


def spawn_rng(rng: np.random.Generator) -> np.random.Generator:
    # derive a deterministic sub-seed for reproducibility across trials
    return np.random.default_rng(int(rng.integers(0, 2**31 - 1)))
