# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Model class for 2D spring networks
# Static description: node masses, connectivity and force parameters

from typing import List, Optional, Tuple

import numpy as np
import warp as wp

from ..config import (
    GRAVITY,
    GRAVITY_DAMPEN,
    NODE_RADIUS,
    check_bounds,
    check_mass,
    check_rest_length,
    check_stiffness,
)
from .layout import generate_positions
from .state import State
from .topology import TopologyMode, build_adjacency, edge_pairs, to_csr


def vec2_array(values, device) -> wp.array:
    """Upload an [N, 2] array as wp.vec2 (empty arrays included)."""
    values = np.asarray(values, dtype=np.float32).reshape(-1, 2)
    if len(values) == 0:
        return wp.zeros(0, dtype=wp.vec2, device=device)
    return wp.array(values, dtype=wp.vec2, device=device)


def int_array(values, device) -> wp.array:
    values = np.asarray(values, dtype=np.int32).reshape(-1)
    if len(values) == 0:
        return wp.zeros(0, dtype=int, device=device)
    return wp.array(values, dtype=int, device=device)


class Model:
    """
    Represents the static definition of a 2D spring network.

    Stores node masses, the spring topology and the force parameters that
    are read every tick. Positions and velocities live in State objects
    created by state().

    Key Features:
        - Node properties (mass, radius, initial position/velocity)
        - Adjacency list with a CSR copy for the force kernel
        - Canonical (i < j) edge list for rendering
        - Uniform spring stiffness / rest length, gravity toggle, bounds
    """

    def __init__(self, device='cpu'):
        """
        Initialize an empty Model.

        Args:
            device (str): Device on which the Model's data will be allocated ('cuda' or 'cpu')
        """
        wp.init()
        self.device = wp.get_device(device)

        # Node properties
        self.particle_q = None              # Initial positions, shape [particle_count], vec2
        self.particle_qd = None             # Initial velocities, shape [particle_count], vec2
        self.particle_mass = None           # Node mass, shape [particle_count], float
        self.particle_inv_mass = None       # Node inverse mass, shape [particle_count], float
        self.particle_radius = NODE_RADIUS  # Collision/render radius (uniform)
        self.particle_count = 0
        self.mass = 10.0                    # Uniform mass applied to every node

        # Spring network
        self.topology = TopologyMode.CHAIN
        self.adjacency: List[List[int]] = []
        self.adj_offsets = None             # CSR offsets, shape [particle_count + 1], int
        self.adj_indices = None             # CSR neighbor indices, int
        self.edges: List[Tuple[int, int]] = []
        self.stiffness = 2.0
        self.rest_length = 40.0

        # Physical parameters
        self.gravity_enabled = True
        self.gravity = GRAVITY
        self.gravity_dampen = GRAVITY_DAMPEN
        self.bounds = (1000.0, 700.0)       # (width, height)

        self.set_particles(np.zeros((0, 2), dtype=np.float32))

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def state(self) -> State:
        """
        Create and return a new State object for this model.

        The returned state is initialized with the initial configuration
        from the model description.

        Returns:
            State: The state object
        """
        s = State()
        s.particle_q = wp.clone(self.particle_q)
        s.particle_qd = wp.clone(self.particle_qd)
        s.particle_f = wp.zeros(self.particle_count, dtype=wp.vec2, device=self.device)
        return s

    # ========================================================================
    # STRUCTURE
    # ========================================================================

    def set_particles(self, positions: np.ndarray, velocities: Optional[np.ndarray] = None):
        """
        Replace the node set and rebuild the topology for the new count.

        Args:
            positions: Array of shape (N, 2)
            velocities: Array of shape (N, 2), zeros if None
        """
        positions = np.asarray(positions, dtype=np.float32).reshape(-1, 2)
        n = len(positions)
        if velocities is None:
            velocities = np.zeros((n, 2), dtype=np.float32)

        self.particle_count = n
        self.particle_q = vec2_array(positions, self.device)
        self.particle_qd = vec2_array(velocities, self.device)
        self._allocate_mass()
        self.set_topology(self.topology)

    def set_topology(self, mode):
        """Rebuild the adjacency for the current node count."""
        self.topology = TopologyMode.parse(mode)
        self.adjacency = build_adjacency(self.particle_count, self.topology)
        self.edges = edge_pairs(self.adjacency)

        offsets, indices = to_csr(self.adjacency)
        self.adj_offsets = int_array(offsets, self.device)
        self.adj_indices = int_array(indices, self.device)

    # ========================================================================
    # PARAMETERS
    # ========================================================================

    def set_mass(self, mass: float):
        """
        Set the uniform node mass.

        Raises:
            ValueError: If mass is not positive
        """
        check_mass(mass)
        self.mass = float(mass)
        self._allocate_mass()

    def set_stiffness(self, stiffness: float):
        check_stiffness(stiffness)
        self.stiffness = float(stiffness)

    def set_rest_length(self, rest_length: float):
        check_rest_length(rest_length)
        self.rest_length = float(rest_length)

    def set_gravity(self, enabled: bool):
        """Toggle gravity; magnitude is fixed at g * mass / gravity_dampen."""
        self.gravity_enabled = bool(enabled)

    def set_bounds(self, width: float, height: float):
        check_bounds(width, height)
        self.bounds = (float(width), float(height))

    def _allocate_mass(self):
        n = self.particle_count
        if n == 0:
            self.particle_mass = wp.zeros(0, dtype=float, device=self.device)
            self.particle_inv_mass = wp.zeros(0, dtype=float, device=self.device)
            return
        self.particle_mass = wp.full(n, self.mass, dtype=float, device=self.device)
        self.particle_inv_mass = wp.full(n, 1.0 / self.mass, dtype=float, device=self.device)

    # ========================================================================
    # CONSTRUCTION
    # ========================================================================

    @classmethod
    def from_config(cls, config, rng: Optional[np.random.Generator] = None):
        """
        Create a hanging-chain layout from a SimConfig.

        Args:
            config: Validated SimConfig
            rng: Random generator for the layout jitter

        Returns:
            Model: The initialized model
        """
        rng = rng if rng is not None else np.random.default_rng(config.seed)

        model = cls(device=config.device)
        model.particle_radius = float(config.radius)
        model.set_mass(config.mass)
        model.set_stiffness(config.stiffness)
        model.set_rest_length(config.rest_length)
        model.set_gravity(config.gravity)
        model.set_bounds(config.width, config.height)
        model.topology = TopologyMode.parse(config.topology)

        positions = generate_positions(config.num_nodes, config.width, config.rest_length, rng)
        model.set_particles(positions)

        if config.verbose:
            print(f"✓ Created {model.particle_count} nodes")
            print(f"✓ Created {model.edge_count} springs ({model.topology.value})")

        return model
