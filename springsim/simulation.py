# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Simulation: model + double-buffered state + solver + interaction state

from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from .config import SimConfig, check_node_count
from .interaction import InteractionController, InteractionState
from .sim import Model, TopologyMode, append_position, generate_positions
from .solvers import PARTICLE_DRAGGED, PARTICLE_PINNED, SolverFrameStep


class Simulation:
    """
    Frame-driven spring network simulation.

    Owns everything one tick needs: the Model (topology and parameters),
    two States that are swapped every frame, the solver, and the
    interaction state (pinned nodes, dragged node). The host calls the
    set_*() methods on parameter changes, feeds events to ``controller``,
    calls step() once per displayed frame and reads positions()/edges()
    to draw.

    ``config`` is a private copy of the configuration passed in; the set_*()
    methods keep it in sync with the live parameters, and the caller's
    object is never modified.

    Not thread-safe: events and step() must run on the same thread.

    Example:
        >>> sim = Simulation(SimConfig(num_nodes=5, seed=0))
        >>> for _ in range(60):
        ...     sim.step()
        >>> sim.positions().shape
        (5, 2)
    """

    def __init__(self, config: Optional[SimConfig] = None, rng: Optional[np.random.Generator] = None):
        """
        Args:
            config: Simulation parameters (defaults if None)
            rng: Random generator for layout jitter and randomize()

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = replace(config or SimConfig()).validate()
        self.config.topology = TopologyMode.parse(self.config.topology).value
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self.model = Model.from_config(self.config, self.rng)
        self.solver = SolverFrameStep(self.model)
        self.state_in = self.model.state()
        self.state_out = self.model.state()

        self.interaction = InteractionState(pinned=self._default_pins())
        self.controller = InteractionController(self, self.interaction)

        self.frame = 0

    # ========================================================================
    # READOUT
    # ========================================================================

    @property
    def num_nodes(self) -> int:
        return self.model.particle_count

    @property
    def radius(self) -> float:
        return self.model.particle_radius

    @property
    def pinned(self) -> frozenset:
        return frozenset(self.interaction.pinned)

    @property
    def dragged_index(self) -> Optional[int]:
        return self.interaction.dragged_index

    def positions(self) -> np.ndarray:
        """Current node positions, shape (N, 2), as a copy."""
        return self.state_in.particle_q.numpy().reshape(-1, 2).copy()

    def velocities(self) -> np.ndarray:
        """Current node velocities, shape (N, 2), as a copy."""
        return self.state_in.particle_qd.numpy().reshape(-1, 2).copy()

    def edges(self) -> List[Tuple[int, int]]:
        """Spring endpoints as (i, j) pairs with i < j, each pair once."""
        return list(self.model.edges)

    def edge_strains(self) -> np.ndarray:
        """Normalized strain per edge in [-1, 1] (zeros until the first step after a change)."""
        strains = self.solver.edge_strains_normalized
        if len(strains) != self.model.edge_count:
            return np.zeros(self.model.edge_count, dtype=np.float32)
        return strains

    def forces(self) -> np.ndarray:
        """Net force on every node for the current positions, shape (N, 2)."""
        particle_f = self.solver.eval_forces(self.state_in)
        return particle_f.numpy().reshape(-1, 2).copy()

    def force(self, index: int) -> np.ndarray:
        """
        Net force on one node: gravity plus all incident springs, damped once.

        Raises:
            IndexError: If index is not a node
        """
        if not 0 <= index < self.num_nodes:
            raise IndexError(f"node index {index} out of range for {self.num_nodes} nodes")
        return self.forces()[index]

    def kinetic_energy(self) -> float:
        """Total kinetic energy 0.5 * m * |v|^2 over all nodes."""
        v = self.velocities().astype(np.float64)
        return float(0.5 * self.model.mass * np.sum(v * v))

    def particle_flags(self) -> np.ndarray:
        """Per-node solver flags from the interaction state (pinned wins over dragged)."""
        flags = np.zeros(self.num_nodes, dtype=np.int32)
        dragged = self.interaction.dragged_index
        if dragged is not None and dragged < self.num_nodes:
            flags[dragged] = int(PARTICLE_DRAGGED)
        for i in self.interaction.pinned:
            if i < self.num_nodes:
                flags[i] = int(PARTICLE_PINNED)
        return flags

    # ========================================================================
    # STEPPING
    # ========================================================================

    def step(self):
        """Advance one frame. A simulation without nodes does nothing."""
        if self.num_nodes == 0:
            return

        self.solver.step(self.state_in, self.state_out, self.particle_flags())
        self.state_in, self.state_out = self.state_out, self.state_in
        self.frame += 1

    # ========================================================================
    # DIRECT NODE ACCESS (used by the interaction controller)
    # ========================================================================

    def translate_node(self, index: int, delta):
        q = self.positions()
        q[index] += np.asarray(delta, dtype=np.float32)
        self.state_in.particle_q.assign(q)

    def set_node_velocity(self, index: int, velocity):
        qd = self.velocities()
        qd[index] = np.asarray(velocity, dtype=np.float32)
        self.state_in.particle_qd.assign(qd)

    def set_state(self, positions, velocities=None):
        """
        Replace every node's position (and velocity, zero if None).

        The node count follows ``positions``; pins and drags on indices that
        no longer exist are dropped.
        """
        positions = np.asarray(positions, dtype=np.float32).reshape(-1, 2)
        if velocities is not None:
            velocities = np.asarray(velocities, dtype=np.float32).reshape(-1, 2)
            if velocities.shape != positions.shape:
                raise ValueError(
                    f"velocities shape {velocities.shape} does not match positions {positions.shape}"
                )
        self._load_particles(positions, velocities)
        self.interaction.forget_nodes_from(len(positions))
        self.config.num_nodes = len(positions)

    # ========================================================================
    # PARAMETERS
    # ========================================================================

    def set_stiffness(self, stiffness: float):
        self.model.set_stiffness(stiffness)
        self.config.stiffness = self.model.stiffness

    def set_rest_length(self, rest_length: float):
        self.model.set_rest_length(rest_length)
        self.config.rest_length = self.model.rest_length

    def set_mass(self, mass: float):
        """
        Apply a new uniform mass to every node.

        Raises:
            ValueError: If mass is not positive (nothing is changed)
        """
        self.model.set_mass(mass)
        self.config.mass = self.model.mass

    def set_gravity(self, enabled: bool):
        self.model.set_gravity(enabled)
        self.config.gravity = self.model.gravity_enabled

    def set_bounds(self, width: float, height: float):
        self.model.set_bounds(width, height)
        self.config.width, self.config.height = self.model.bounds

    def set_topology_mode(self, mode):
        """Reconnect the existing nodes; positions and velocities are kept."""
        self.model.set_topology(mode)
        self.config.topology = self.model.topology.value
        self._log(f"✓ Topology {self.model.topology.value}: {self.model.edge_count} springs")

    def set_node_count(self, num_nodes: int):
        """
        Grow or shrink the chain one node at a time.

        New nodes hang one rest length below the current last node with a
        small sideways jitter and start at rest. Removed nodes are taken from
        the end. Every other node keeps its position and velocity.

        Raises:
            ValueError: If num_nodes is negative
        """
        check_node_count(num_nodes)

        q = self.positions()
        qd = self.velocities()
        count = len(q)

        if num_nodes > count:
            new_q = list(q)
            for _ in range(num_nodes - count):
                if new_q:
                    new_q.append(append_position(new_q[-1], self.model.rest_length, self.rng))
                else:
                    new_q.append(generate_positions(1, self.model.bounds[0], self.model.rest_length, self.rng)[0])
            q = np.asarray(new_q, dtype=np.float32).reshape(-1, 2)
            qd = np.vstack([qd, np.zeros((num_nodes - count, 2), dtype=np.float32)])
        elif num_nodes < count:
            q = q[:num_nodes]
            qd = qd[:num_nodes]

        self._load_particles(q, qd)
        self.interaction.forget_nodes_from(num_nodes)
        self.config.num_nodes = num_nodes
        self._log(f"✓ Resized to {num_nodes} nodes, {self.model.edge_count} springs")

    def rebuild(self):
        """Regenerate the layout from scratch and restore the default pins."""
        positions = generate_positions(
            self.config.num_nodes, self.model.bounds[0], self.model.rest_length, self.rng
        )
        self._load_particles(positions, None)
        self.interaction.pinned = self._default_pins()
        self.interaction.dragged_index = None
        self.frame = 0
        self._log(f"✓ Rebuilt {self.num_nodes} nodes, {self.model.edge_count} springs")

    reset = rebuild

    def randomize(self, rng: Optional[np.random.Generator] = None):
        """
        Draw a random set of parameters and rebuild.

            k ∈ [2, 6), rest length ∈ {0..199}, nodes ∈ {3..6},
            mass ∈ {5..994}, gravity with probability 1/2

        Node 0 is pinned when gravity is on, nothing otherwise.

        Controls locked by the preset keep their current values. A locked
        topology also keeps the node count, and a locked gravity keeps the
        current pins.
        """
        rng = rng if rng is not None else self.rng
        locked = self.config.is_locked

        stiffness = float(rng.random() * 4 + 2)
        rest_length = float(rng.integers(0, 200))
        num_nodes = int(rng.integers(3, 7))
        mass = float(rng.integers(5, 995))
        gravity = bool(rng.random() > 0.5)

        self.set_stiffness(stiffness)
        self.set_rest_length(rest_length)
        if not locked('mass'):
            self.set_mass(mass)
        if not locked('gravity'):
            self.set_gravity(gravity)
        if not locked('topology'):
            self.config.num_nodes = num_nodes

        pinned = set(self.interaction.pinned)
        self.rebuild()
        if locked('gravity'):
            self.interaction.pinned = {i for i in pinned if i < self.num_nodes}
        else:
            self.interaction.pinned = {0} if gravity and self.num_nodes > 0 else set()

        self._log(
            f"✓ Randomized: k={stiffness:.2f}, L={rest_length:.0f}, n={self.num_nodes}, "
            f"mass={self.model.mass:.0f}, gravity={'on' if self.model.gravity_enabled else 'off'}"
        )

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _default_pins(self) -> set:
        if self.config.pin_first_node and self.num_nodes > 0:
            return {0}
        return set()

    def _load_particles(self, positions, velocities):
        self.model.set_particles(positions, velocities)
        self.state_in = self.model.state()
        self.state_out = self.model.state()

    def _log(self, message: str):
        if self.config.verbose:
            print(message)
