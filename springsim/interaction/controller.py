# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Pointer / keyboard interaction with a running spring network

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Set, Tuple

import numpy as np


class InteractionMode(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'
    SHIFT_ARMED = 'shift_armed'


@dataclass
class InteractionState:
    """Pin and drag bookkeeping shared by the controller and the solver flags."""
    pinned: Set[int] = field(default_factory=set)
    dragged_index: Optional[int] = None
    shift_held: bool = False
    last_pointer_pos: Tuple[float, float] = (0.0, 0.0)
    last_pointer_delta: Tuple[float, float] = (0.0, 0.0)

    @property
    def mode(self) -> InteractionMode:
        if self.dragged_index is not None:
            return InteractionMode.DRAGGING
        if self.shift_held:
            return InteractionMode.SHIFT_ARMED
        return InteractionMode.IDLE

    def forget_nodes_from(self, count: int):
        """Drop references to node indices >= count (after the node set shrank)."""
        self.pinned = {i for i in self.pinned if i < count}
        if self.dragged_index is not None and self.dragged_index >= count:
            self.dragged_index = None


def nearest_node(positions: np.ndarray, point) -> Optional[int]:
    """
    Index of the node closest to ``point``.

    Ties go to the lowest index. Returns None for an empty node set, so
    node 0 is never confused with "nothing found".

    Args:
        positions: Array of shape (N, 2)
        point: (x, y) query point
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
    if len(positions) == 0:
        return None

    d = positions - np.asarray(point, dtype=np.float64)
    dist = np.hypot(d[:, 0], d[:, 1])
    return int(np.argmin(dist))


class InteractionController:
    """
    Maps pointer and keyboard events onto pin toggles and node drags.

    States:
        IDLE         pointer-down starts a drag on the nearest node
        SHIFT_ARMED  shift is held; pointer-down toggles the nearest node's pin
        DRAGGING     pointer-move translates the node; pointer-up throws it
                     with the last pointer delta as its velocity

    The controller mutates node state through the simulation:
        sim.positions() -> (N, 2) array
        sim.translate_node(i, delta)
        sim.set_node_velocity(i, velocity)

    Events that make no sense in the current state (release without press,
    move without drag) are ignored.
    """

    SHIFT_KEYS = ('shift', 'lshift', 'rshift', 'left shift', 'right shift')

    def __init__(self, sim, state: Optional[InteractionState] = None):
        self.sim = sim
        self.state = state if state is not None else InteractionState()

    @property
    def mode(self) -> InteractionMode:
        return self.state.mode

    # ========================================================================
    # KEYBOARD
    # ========================================================================

    def key_down(self, key: str):
        if str(key).lower() in self.SHIFT_KEYS:
            self.state.shift_held = True

    def key_up(self, key: str):
        if str(key).lower() in self.SHIFT_KEYS:
            self.state.shift_held = False

    # ========================================================================
    # POINTER
    # ========================================================================

    def pointer_down(self, x: float, y: float) -> Optional[int]:
        """
        Press at (x, y).

        Returns:
            Index of the node that was pin-toggled or grabbed, or None
        """
        point = (float(x), float(y))
        index = nearest_node(self.sim.positions(), point)
        if index is None:
            return None

        if self.state.shift_held:
            self.toggle_pin(index)
            return index

        self.state.dragged_index = index
        self.state.last_pointer_pos = point
        self.state.last_pointer_delta = (0.0, 0.0)
        self.sim.set_node_velocity(index, (0.0, 0.0))
        return index

    def pointer_move(self, x: float, y: float):
        index = self.state.dragged_index
        if index is None:
            return

        px, py = self.state.last_pointer_pos
        delta = (float(x) - px, float(y) - py)

        self.sim.translate_node(index, delta)

        self.state.last_pointer_pos = (float(x), float(y))
        self.state.last_pointer_delta = delta

    def pointer_up(self):
        index = self.state.dragged_index
        if index is None:
            return

        self.sim.set_node_velocity(index, self.state.last_pointer_delta)
        self.state.dragged_index = None

    # ========================================================================
    # PINS
    # ========================================================================

    def toggle_pin(self, index: int) -> bool:
        """Flip pin membership of a node; returns True if it is now pinned."""
        if index in self.state.pinned:
            self.state.pinned.discard(index)
            return False
        self.state.pinned.add(index)
        return True
