"""
Tests for pointer/keyboard interaction.
"""

import numpy as np

from springsim import InteractionMode, SimConfig, Simulation, nearest_node


def make_sim(**overrides):
    params = dict(num_nodes=4, gravity=False, pin_first_node=False, seed=0)
    params.update(overrides)
    sim = Simulation(SimConfig(**params))
    sim.set_state([(100.0, 100.0), (200.0, 100.0), (300.0, 100.0), (400.0, 100.0)])
    return sim


def test_nearest_node():
    positions = np.array([[0.0, 0.0], [10.0, 0.0], [20.0, 0.0]])

    assert nearest_node(positions, (1.0, 1.0)) == 0
    assert nearest_node(positions, (19.0, 3.0)) == 2
    # Equidistant from 0 and 1: lowest index wins
    assert nearest_node(positions, (5.0, 0.0)) == 0
    assert nearest_node(np.zeros((0, 2)), (5.0, 5.0)) is None


def test_drag_node_zero():
    """Node 0 is a valid drag target."""
    sim = make_sim()
    assert sim.controller.pointer_down(101.0, 99.0) == 0
    assert sim.dragged_index == 0
    assert sim.controller.mode is InteractionMode.DRAGGING


def test_drag_and_throw():
    """The release velocity is the last pointer displacement."""
    sim = make_sim()
    controller = sim.controller

    controller.pointer_down(300.0, 100.0)
    controller.pointer_move(305.0, 97.0)

    assert np.allclose(sim.positions()[2], [305.0, 97.0])

    controller.pointer_up()
    assert sim.dragged_index is None
    assert np.array_equal(sim.velocities()[2], [5.0, -3.0])


def test_release_without_motion_throws_nothing():
    sim = make_sim()
    sim.set_node_velocity(1, (7.0, 7.0))

    sim.controller.pointer_down(200.0, 100.0)
    sim.controller.pointer_up()
    assert np.array_equal(sim.velocities()[1], [0.0, 0.0])


def test_shift_click_toggles_pin():
    sim = make_sim()
    controller = sim.controller

    controller.key_down('shift')
    assert controller.mode is InteractionMode.SHIFT_ARMED

    controller.pointer_down(400.0, 100.0)
    assert sim.pinned == {3}
    assert sim.dragged_index is None, "shift-click must not start a drag"

    controller.pointer_down(398.0, 102.0)
    assert sim.pinned == frozenset()

    controller.key_up('shift')
    assert controller.mode is InteractionMode.IDLE


def test_stray_events_ignored():
    sim = make_sim()
    before = sim.positions()

    sim.controller.pointer_up()
    sim.controller.pointer_move(50.0, 50.0)

    assert np.array_equal(sim.positions(), before)
    assert sim.dragged_index is None


def test_shrinking_forgets_pins_and_drag():
    sim = make_sim()
    sim.controller.toggle_pin(3)
    sim.controller.pointer_down(300.0, 100.0)

    sim.set_node_count(2)
    assert sim.pinned == frozenset()
    assert sim.dragged_index is None
