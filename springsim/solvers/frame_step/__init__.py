# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0

from .solver_frame_step import SolverFrameStep
from .kernels_particle import PARTICLE_DRAGGED, PARTICLE_FREE, PARTICLE_PINNED

__all__ = [
    "SolverFrameStep",
    "PARTICLE_FREE",
    "PARTICLE_PINNED",
    "PARTICLE_DRAGGED",
]
