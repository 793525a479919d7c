# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Frame-locked damped Euler solver for 2D spring networks

import numpy as np
import warp as wp

from ...config import FORCE_DAMPING, RESTITUTION, VELOCITY_DAMPING
from ..solver import SolverBase
from .kernels_particle import (
    apply_boundary_2d,
    eval_node_forces,
    integrate_nodes_2d,
)


class SolverFrameStep(SolverBase):
    """
    Explicit integrator that advances the network by exactly one display frame.

    Forces act as direct velocity deltas (the frame is the implicit time
    step). Energy is removed twice per frame: once on the force and once on
    the integrated velocity. Nodes bounce off the canvas edges inelastically.

    Example:
        >>> model = Model.from_config(SimConfig(device='cpu'))
        >>> solver = SolverFrameStep(model)
        >>> state_in = model.state()
        >>> state_out = model.state()
        >>>
        >>> for i in range(100):
        >>>     solver.step(state_in, state_out)
        >>>     state_in, state_out = state_out, state_in
    """

    def __init__(self, model,
                 force_damping: float = FORCE_DAMPING,
                 velocity_damping: float = VELOCITY_DAMPING,
                 restitution: float = RESTITUTION):
        """
        Initialize the frame-step solver.

        Args:
            model: The Model to be simulated
            force_damping: Factor applied once to each node's total force
            velocity_damping: Factor applied to velocity after integration
            restitution: Fraction of normal velocity kept on a wall bounce
        """
        super().__init__(model)

        self.force_damping = force_damping
        self.velocity_damping = velocity_damping
        self.restitution = restitution

    def _flags_array(self, particle_flags):
        if isinstance(particle_flags, wp.array):
            return particle_flags

        n = self.model.particle_count
        if particle_flags is None:
            return wp.zeros(n, dtype=int, device=self.device)

        flags_np = np.asarray(particle_flags, dtype=np.int32)
        if flags_np.shape != (n,):
            raise ValueError(f"particle_flags must have shape ({n},), got {flags_np.shape}")
        return wp.array(flags_np, dtype=int, device=self.device)

    def eval_forces(self, state, particle_f=None) -> wp.array:
        """
        Evaluate the force on every node without advancing the state.

        Args:
            state: State whose positions are read
            particle_f: Output array, state.particle_f if None

        Returns:
            The force array that was written
        """
        if particle_f is None:
            particle_f = state.particle_f
        particle_f.zero_()
        eval_node_forces(self.model, state, particle_f, self.force_damping)
        return particle_f

    def step(self, state_in, state_out, particle_flags=None):
        """
        Advance the simulation by one frame.

        Args:
            state_in: The input state (positions at the start of the frame)
            state_out: The output state
            particle_flags: Per-node PARTICLE_* flags (numpy, list or wp.array);
                None treats every node as free
        """
        model = self.model

        if model.particle_count == 0:
            return state_out

        flags = self._flags_array(particle_flags)

        # Forces from positions at the start of the frame
        self.eval_forces(state_in)

        # Integrate free nodes, hold pinned ones, pass dragged ones through
        wp.launch(
            kernel=integrate_nodes_2d,
            dim=model.particle_count,
            inputs=[
                state_in.particle_q,
                state_in.particle_qd,
                state_in.particle_f,
                model.particle_inv_mass,
                flags,
                self.velocity_damping,
            ],
            outputs=[state_out.particle_q, state_out.particle_qd],
            device=model.device,
        )

        width, height = model.bounds
        wp.launch(
            kernel=apply_boundary_2d,
            dim=model.particle_count,
            inputs=[
                state_out.particle_q,
                state_out.particle_qd,
                flags,
                model.particle_radius,
                width,
                height,
                self.restitution,
            ],
            device=model.device,
        )

        # Keep the force readout on the new state as well
        wp.copy(state_out.particle_f, state_in.particle_f)

        self._update_and_normalize_strains(state_out)

        return state_out
