# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Base solver class for 2D spring networks

import numpy as np


class SolverBase:
    """
    Generic base class for spring network solvers.

    Defines the step() interface and keeps the per-edge strain metrics used
    to color springs.

    Features:
        - Raw edge strain ε = (L - L₀) / L₀ after every step
        - Adaptive strain normalization for visualization
    """

    def __init__(self, model):
        """
        Initialize the solver with a model.

        Args:
            model: The Model object containing the system description
        """
        self.model = model

        # Adaptive strain normalization parameters
        self.strain_scale = 0.01
        self.edge_strains = np.zeros(0, dtype=np.float32)
        self.edge_strains_normalized = np.zeros(0, dtype=np.float32)
        self._strain_update_counter = 0
        self._strain_update_interval = 10  # Update every N steps
        self._ema_alpha = 0.1  # Exponential moving average smoothing factor

    @property
    def device(self):
        """
        Get the device used by the solver.

        Returns:
            The device used by the solver
        """
        return self.model.device

    def step(self, state_in, state_out, particle_flags=None):
        """
        Advance the model by one frame.

        Must be implemented by concrete solver subclasses.

        Args:
            state_in: The input state
            state_out: The output state
            particle_flags: Per-node interaction flags, or None for all free
        """
        raise NotImplementedError("Concrete solvers must implement step()")

    def _compute_edge_strains(self, positions: np.ndarray) -> np.ndarray:
        """
        Raw strain for each canonical edge.

        A zero rest length is floored so that any stretch reads as a large
        positive strain instead of dividing by zero.
        """
        edges = self.model.edges
        if not edges:
            return np.zeros(0, dtype=np.float32)

        pairs = np.asarray(edges, dtype=np.int32)
        lengths = np.linalg.norm(positions[pairs[:, 0]] - positions[pairs[:, 1]], axis=1)
        rest = max(self.model.rest_length, 1e-6)
        return ((lengths - self.model.rest_length) / rest).astype(np.float32)

    def _update_strain_normalization(self):
        """
        Update the strain scale from the observed strain distribution.

            ε_scale(t+1) = α * percentile(|ε|, 95) + (1-α) * ε_scale(t)

        The 95th percentile ignores transient spikes (a thrown node), and the
        EMA keeps the color scale from flickering between frames.
        """
        abs_strains = np.abs(self.edge_strains)
        if len(abs_strains) == 0:
            return

        percentile_95 = float(np.percentile(abs_strains, 95))

        # Avoid degenerate case (minimum physical threshold)
        if percentile_95 < 1e-8:
            percentile_95 = 0.01

        self.strain_scale = self._ema_alpha * percentile_95 + (1 - self._ema_alpha) * self.strain_scale

    def _update_and_normalize_strains(self, state):
        """
        Refresh edge strains from ``state`` and their normalized copy in [-1, 1].

        Should be called at the end of each solver's step() method.
        """
        positions = state.particle_q.numpy()
        self.edge_strains = self._compute_edge_strains(positions)

        self._strain_update_counter += 1
        if self._strain_update_counter >= self._strain_update_interval:
            self._update_strain_normalization()
            self._strain_update_counter = 0

        safe_scale = max(self.strain_scale, 1e-8)
        self.edge_strains_normalized = np.clip(self.edge_strains / safe_scale, -1.0, 1.0)
