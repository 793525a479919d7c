"""
springsim: interactive 2D mass-spring-damper networks.

A small set of point masses joined by Hooke springs, integrated once per
displayed frame with gravity, damping and inelastic wall bounces. Nodes can
be pinned, dragged and thrown.

Modules:
    - sim: Model / State / topology builders / layout
    - solvers: frame-step solver and its Warp kernels
    - interaction: pointer and keyboard controller
    - simulation: Simulation facade used by front ends
    - pygame_renderer: drawing helpers for the interactive demo
"""

from .config import SimConfig
from .interaction import InteractionController, InteractionMode, InteractionState, nearest_node
from .sim import Model, State, TopologyMode, build_adjacency, edge_pairs
from .simulation import Simulation
from .solvers import SolverFrameStep

__all__ = [
    "SimConfig",
    "Simulation",
    "Model",
    "State",
    "TopologyMode",
    "build_adjacency",
    "edge_pairs",
    "SolverFrameStep",
    "InteractionController",
    "InteractionMode",
    "InteractionState",
    "nearest_node",
]

__version__ = "0.1.0"
