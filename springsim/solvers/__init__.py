# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Solvers module for 2D spring networks

from .solver import SolverBase
from .frame_step import (
    PARTICLE_DRAGGED,
    PARTICLE_FREE,
    PARTICLE_PINNED,
    SolverFrameStep,
)

__all__ = [
    "SolverBase",
    "SolverFrameStep",
    "PARTICLE_FREE",
    "PARTICLE_PINNED",
    "PARTICLE_DRAGGED",
]
