# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Initial node placement for hanging chains

import numpy as np

from ..config import JITTER_SCALE, LAYOUT_PADDING


def jitter(rng: np.random.Generator, scale: float = JITTER_SCALE) -> float:
    """Small signed horizontal offset in [-scale/2, scale/2)."""
    return float((rng.random() - 0.5) * scale)


def generate_positions(num_nodes: int, width: float, rest_length: float,
                       rng: np.random.Generator) -> np.ndarray:
    """
    Lay nodes out in a vertical column hanging from the top of the canvas.

    Node 0 sits exactly on the center line; every other node gets a small
    horizontal jitter so springs start with a well-defined sideways direction.

    Args:
        num_nodes: Number of nodes
        width: Canvas width (column is centered horizontally)
        rest_length: Vertical spacing between consecutive nodes
        rng: Random generator for the jitter

    Returns:
        float32 array of shape [num_nodes, 2]
    """
    positions = np.zeros((max(num_nodes, 0), 2), dtype=np.float32)

    for i in range(num_nodes):
        offset = jitter(rng) if i > 0 else 0.0
        positions[i, 0] = width / 2.0 + offset
        positions[i, 1] = rest_length * i + LAYOUT_PADDING

    return positions


def append_position(last: np.ndarray, rest_length: float,
                    rng: np.random.Generator) -> np.ndarray:
    """Position for a node appended after ``last``: one rest length below, jittered sideways."""
    return np.array(
        [last[0] + jitter(rng), last[1] + rest_length],
        dtype=np.float32,
    )
