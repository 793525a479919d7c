# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0

from .state import State
from .model import Model
from .topology import TopologyMode, build_adjacency, edge_pairs, to_csr
from .layout import generate_positions, append_position

__all__ = [
    "Model",
    "State",
    "TopologyMode",
    "build_adjacency",
    "edge_pairs",
    "to_csr",
    "generate_positions",
    "append_position",
]
