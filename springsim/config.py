# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Simulation parameters and physical constants for springsim

import argparse
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple


# Physical constants (screen space, +y is down, one frame per tick)
GRAVITY = 9.8
GRAVITY_DAMPEN = 10.0
FORCE_DAMPING = 0.96
VELOCITY_DAMPING = 0.96
RESTITUTION = 0.76

# Layout constants
NODE_RADIUS = 4.0
LAYOUT_PADDING = 120.0
JITTER_SCALE = 10.0

# Control ranges (slider limits of the interactive front end)
STIFFNESS_RANGE = (0.1, 6.0)
STIFFNESS_STEP = 0.1
REST_LENGTH_RANGE = (0.0, 200.0)
NODE_COUNT_RANGE = (1, 20)
MASS_RANGE = (5.0, 1000.0)


@dataclass
class SimConfig:
    """Configuration for a spring network simulation."""
    # Springs
    stiffness: float = 2.0
    rest_length: float = 40.0
    topology: str = 'chain'

    # Nodes
    num_nodes: int = 4
    mass: float = 10.0
    radius: float = NODE_RADIUS
    pin_first_node: bool = True

    # Forces
    gravity: bool = True

    # Bounds (canvas size in pixels)
    width: float = 1000.0
    height: float = 700.0

    # Runtime
    device: str = 'cpu'
    seed: Optional[int] = None
    verbose: bool = False

    # Locked controls (rope variant)
    locked: Tuple[str, ...] = field(default_factory=tuple)

    def validate(self) -> 'SimConfig':
        """
        Check parameter bounds.

        Raises:
            ValueError: If any parameter would make the simulation undefined
        """
        check_mass(self.mass)
        check_stiffness(self.stiffness)
        check_rest_length(self.rest_length)
        check_node_count(self.num_nodes)
        check_bounds(self.width, self.height)
        if self.radius < 0:
            raise ValueError(f"radius must be non-negative, got {self.radius}")
        return self

    def is_locked(self, control: str) -> bool:
        return control in self.locked

    # ========================================================================
    # PRESETS
    # ========================================================================

    @classmethod
    def spring(cls, **overrides) -> 'SimConfig':
        """Open chain with every control available."""
        return replace(cls(), **overrides)

    @classmethod
    def shape(cls, **overrides) -> 'SimConfig':
        """Fully-connected graph ("shape" mode)."""
        return replace(cls(topology='fully_connected'), **overrides)

    @classmethod
    def rope(cls, **overrides) -> 'SimConfig':
        """
        Fixed chain without mass/gravity/topology controls.

        Example:
            >>> cfg = SimConfig.rope(num_nodes=12)
            >>> cfg.is_locked('mass')
            True
        """
        base = cls(
            num_nodes=10,
            rest_length=30.0,
            locked=('mass', 'gravity', 'topology'),
        )
        return replace(base, **overrides)

    @classmethod
    def from_preset(cls, name: str, **overrides) -> 'SimConfig':
        presets = {
            'spring': cls.spring,
            'shape': cls.shape,
            'rope': cls.rope,
        }
        if name not in presets:
            raise ValueError(f"Unknown preset '{name}' (expected one of {sorted(presets)})")
        return presets[name](**overrides)

    # ========================================================================
    # COMMAND LINE
    # ========================================================================

    @classmethod
    def add_common_args(cls, parser: argparse.ArgumentParser) -> None:
        """Add common command-line arguments to parser."""
        parser.add_argument('--preset', type=str, default='spring',
                            choices=['spring', 'shape', 'rope'],
                            help='Variant to run (default: spring)')
        parser.add_argument('--stiffness', '-k', type=float, default=None,
                            help='Spring stiffness k (default: preset)')
        parser.add_argument('--rest-length', '-l', type=float, default=None,
                            help='Spring rest length in pixels (default: preset)')
        parser.add_argument('--num-nodes', '-n', type=int, default=None,
                            help='Number of nodes (default: preset)')
        parser.add_argument('--mass', '-m', type=float, default=None,
                            help='Mass of every node (default: preset)')
        parser.add_argument('--no-gravity', action='store_true',
                            help='Disable gravity')
        parser.add_argument('--device', type=str, default='cpu',
                            choices=['cuda', 'cpu'], help='Device (default: cpu)')
        parser.add_argument('--seed', type=int, default=None,
                            help='Seed for layout jitter and randomize')
        parser.add_argument('--window-width', type=int, default=1000,
                            help='Window width (default: 1000)')
        parser.add_argument('--window-height', type=int, default=700,
                            help='Window height (default: 700)')

    @classmethod
    def config_from_args(cls, args) -> 'SimConfig':
        """Create SimConfig from parsed arguments."""
        overrides = {
            'width': float(args.window_width),
            'height': float(args.window_height),
            'device': args.device,
            'seed': args.seed,
            'verbose': True,
        }
        if args.stiffness is not None:
            overrides['stiffness'] = args.stiffness
        if args.rest_length is not None:
            overrides['rest_length'] = args.rest_length
        if args.num_nodes is not None:
            overrides['num_nodes'] = args.num_nodes
        if args.mass is not None:
            overrides['mass'] = args.mass
        if args.no_gravity:
            overrides['gravity'] = False
        return cls.from_preset(args.preset, **overrides).validate()


def check_mass(mass: float) -> None:
    if not mass > 0:
        raise ValueError(f"mass must be positive, got {mass}")


def check_stiffness(stiffness: float) -> None:
    if not stiffness > 0:
        raise ValueError(f"stiffness must be positive, got {stiffness}")


def check_rest_length(rest_length: float) -> None:
    if not rest_length >= 0:
        raise ValueError(f"rest_length must be non-negative, got {rest_length}")


def check_node_count(num_nodes: int) -> None:
    if num_nodes < 0:
        raise ValueError(f"num_nodes must be non-negative, got {num_nodes}")


def check_bounds(width: float, height: float) -> None:
    if not (width > 0 and height > 0):
        raise ValueError(f"bounds must be positive, got ({width}, {height})")
