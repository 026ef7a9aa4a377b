"""
Random seed management for reproducibility.
"""

from __future__ import annotations

import random
from typing import Optional

import numpy as np


def set_seed(seed: Optional[int]) -> None:
    """
    Set global random seeds for reproducibility.

    Sets seeds for:
    - Python random
    - NumPy legacy global state

    Engines and rollout policies own their own numpy Generators and take
    a seed directly; this covers everything else.

    Args:
        seed: Random seed value (None leaves the generators alone)
    """
    if seed is None:
        return
    random.seed(seed)
    np.random.seed(seed)
