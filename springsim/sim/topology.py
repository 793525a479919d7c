# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Connectivity builders for spring networks

from enum import Enum
from typing import List, Tuple

import numpy as np


class TopologyMode(str, Enum):
    """Which node pairs are joined by springs."""

    CHAIN = 'chain'
    FULLY_CONNECTED = 'fully_connected'

    @classmethod
    def parse(cls, value) -> 'TopologyMode':
        """
        Accept an enum member or its name ("shape" is an alias of fully_connected).

        Raises:
            ValueError: For unknown mode names
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower().replace('-', '_')
        if name == 'shape':
            return cls.FULLY_CONNECTED
        try:
            return cls(name)
        except ValueError:
            raise ValueError(
                f"Unknown topology '{value}' (expected 'chain' or 'fully_connected')"
            ) from None


def build_adjacency(num_nodes: int, mode) -> List[List[int]]:
    """
    Build the adjacency list for a node count and topology mode.

    chain:           i -> i-1, i+1 (open path)
    fully_connected: i -> every j != i (complete graph)

    Args:
        num_nodes: Number of nodes; zero or negative yields an empty structure
        mode: TopologyMode or its name

    Returns:
        adjacency[i] = ordered list of neighbor indices of node i
    """
    mode = TopologyMode.parse(mode)
    adjacency = []

    if mode is TopologyMode.FULLY_CONNECTED:
        for i in range(num_nodes):
            adjacency.append([j for j in range(num_nodes) if j != i])
    else:
        for i in range(num_nodes):
            neighbors = []
            if i > 0:
                neighbors.append(i - 1)
            if i < num_nodes - 1:
                neighbors.append(i + 1)
            adjacency.append(neighbors)

    return adjacency


def edge_pairs(adjacency: List[List[int]]) -> List[Tuple[int, int]]:
    """
    Canonical edge list: each unordered pair once, as (i, j) with i < j.

    Pairs are emitted in order of their lower endpoint, so drawing order is
    stable across frames.
    """
    pairs = []
    for i, neighbors in enumerate(adjacency):
        for j in neighbors:
            if i < j:
                pairs.append((i, j))
    return pairs


def to_csr(adjacency: List[List[int]]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Flatten an adjacency list into CSR arrays for kernel consumption.

    Returns:
        offsets: int32 array of shape [N + 1]; neighbors of i are
                 indices[offsets[i]:offsets[i + 1]]
        indices: int32 array of all neighbor indices
    """
    offsets = np.zeros(len(adjacency) + 1, dtype=np.int32)
    for i, neighbors in enumerate(adjacency):
        offsets[i + 1] = offsets[i] + len(neighbors)

    indices = np.fromiter(
        (j for neighbors in adjacency for j in neighbors),
        dtype=np.int32,
        count=int(offsets[-1]),
    )
    return offsets, indices
