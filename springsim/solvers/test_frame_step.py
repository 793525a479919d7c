"""
Tests for the force model and the frame-step integrator.

Runs on the Warp CPU device.
"""

import numpy as np
import pytest

from springsim import SimConfig, Simulation


def make_sim(positions, velocities=None, **overrides):
    """Simulation with explicit node state, no default pin, gravity off unless asked."""
    params = dict(num_nodes=len(positions), gravity=False, pin_first_node=False,
                  width=1000.0, height=700.0, seed=0)
    params.update(overrides)
    sim = Simulation(SimConfig(**params))
    sim.set_state(positions, velocities)
    return sim


def test_spring_force_hooke():
    """Stretched spring pulls node 0 toward node 1: -k (d - L) d_hat, damped by 0.96."""
    sim = make_sim([(100.0, 100.0), (130.0, 140.0)], stiffness=2.0, rest_length=40.0)

    f = sim.force(0)
    # d = p0 - p1 = (-30, -40), |d| = 50
    expected = -2.0 * (50.0 - 40.0) * np.array([-0.6, -0.8]) * 0.96
    assert np.allclose(f, expected, rtol=1e-5), f"Expected {expected}, got {f}"
    assert np.allclose(sim.force(1), -expected, rtol=1e-5)


def test_compressed_spring_pushes_apart():
    sim = make_sim([(100.0, 100.0), (110.0, 100.0)], stiffness=1.0, rest_length=40.0)

    f0 = sim.force(0)
    assert f0[0] < 0.0, "node 0 should be pushed away from node 1 (to the left)"
    assert np.isclose(f0[0], -1.0 * 30.0 * 0.96, rtol=1e-5)


def test_gravity_term():
    """Gravity adds (0, g * m / 10) before the force damping."""
    sim = make_sim([(500.0, 300.0)], gravity=True, mass=10.0)

    f = sim.force(0)
    assert np.isclose(f[0], 0.0)
    assert np.isclose(f[1], 9.8 * 10.0 / 10.0 * 0.96, rtol=1e-5)

    sim.set_gravity(False)
    assert np.allclose(sim.force(0), 0.0)


def test_coincident_nodes():
    """Zero separation uses the zero angle: push along +x with magnitude k * L."""
    sim = make_sim([(200.0, 200.0), (200.0, 200.0)], stiffness=2.0, rest_length=40.0)

    f = sim.force(0)
    assert np.allclose(f, [2.0 * 40.0 * 0.96, 0.0], rtol=1e-5)


def test_force_is_idempotent():
    """Two evaluations on unchanged state return the same vector."""
    sim = Simulation(SimConfig(num_nodes=6, topology='fully_connected', seed=3))

    first = sim.forces()
    second = sim.forces()
    assert np.array_equal(first, second)
    assert np.array_equal(sim.force(2), first[2])


def test_force_index_out_of_range():
    sim = make_sim([(10.0, 10.0)])
    with pytest.raises(IndexError):
        sim.force(1)
    with pytest.raises(IndexError):
        sim.force(-1)


def test_single_step_update_order():
    """v += F/m, x += v, then v *= 0.96."""
    sim = make_sim([(500.0, 300.0)], velocities=[(2.0, 0.0)])
    sim.step()

    assert np.allclose(sim.positions()[0], [502.0, 300.0])
    assert np.allclose(sim.velocities()[0], [1.92, 0.0], rtol=1e-6)


def test_boundary_bounce():
    """Crossing the right wall clamps to width - r and reverses vx by 0.76."""
    sim = make_sim([(995.0, 300.0)], velocities=[(10.0, 0.0)])
    sim.step()

    assert np.isclose(sim.positions()[0, 0], 1000.0 - sim.radius)
    assert np.isclose(sim.velocities()[0, 0], -10.0 * 0.96 * 0.76, rtol=1e-5)

    sim = make_sim([(300.0, 3.0)], velocities=[(0.0, -5.0)])
    sim.step()
    assert np.isclose(sim.positions()[0, 1], sim.radius)
    assert np.isclose(sim.velocities()[0, 1], 5.0 * 0.96 * 0.76, rtol=1e-5)


def test_boundary_containment():
    """After every tick every node lies within [r, bound - r] on both axes."""
    sim = Simulation(SimConfig(num_nodes=6, pin_first_node=False, gravity=True,
                               width=600.0, height=400.0, seed=1))
    sim.set_node_velocity(3, (300.0, -200.0))
    sim.set_node_velocity(5, (-250.0, 400.0))

    r = sim.radius
    for _ in range(400):
        sim.step()
        q = sim.positions()
        assert np.all(np.isfinite(q))
        assert np.all(q[:, 0] >= r - 1e-3) and np.all(q[:, 0] <= 600.0 - r + 1e-3)
        assert np.all(q[:, 1] >= r - 1e-3) and np.all(q[:, 1] <= 400.0 - r + 1e-3)


def test_pinned_node_holds():
    """A pinned node keeps its position and has exactly zero velocity after a tick."""
    sim = Simulation(SimConfig(num_nodes=4, gravity=True, seed=2))
    assert sim.pinned == {0}

    sim.set_node_velocity(0, (3.0, 4.0))
    start = sim.positions()[0].copy()

    for _ in range(50):
        sim.step()
        assert np.array_equal(sim.positions()[0], start)
        assert np.array_equal(sim.velocities()[0], [0.0, 0.0])

    # The rest of the chain still hangs and moves
    assert not np.allclose(sim.velocities()[1:], 0.0)


def test_pinned_node_follows_shrinking_bounds():
    """A pinned node left outside by a smaller canvas is clamped back inside."""
    sim = Simulation(SimConfig(num_nodes=3, seed=2))
    assert sim.pinned == {0}
    assert sim.positions()[0, 0] == 500.0

    sim.set_bounds(300.0, 700.0)
    for _ in range(50):
        sim.step()
        q = sim.positions()
        assert np.all(q[:, 0] <= 300.0 - sim.radius + 1e-3)
        assert np.array_equal(sim.velocities()[0], [0.0, 0.0])

    assert np.isclose(sim.positions()[0, 0], 300.0 - sim.radius)


def test_free_node_energy_decays():
    """Without springs or gravity kinetic energy never grows, bounces included."""
    sim = make_sim([(500.0, 350.0)], velocities=[(37.0, -21.0)])

    initial = energy = sim.kinetic_energy()
    for _ in range(100):
        sim.step()
        new_energy = sim.kinetic_energy()
        assert new_energy <= energy * (1 + 1e-6)
        energy = new_energy
    # 0.96 ** 200 on the squared speed, before any bounce losses
    assert energy < initial * 1e-3


def test_chain_at_rest_stays_at_rest():
    """Springs exactly at rest length, no gravity: nothing starts moving."""
    positions = [(500.0, 100.0 + 40.0 * i) for i in range(5)]
    sim = make_sim(positions, rest_length=40.0)

    for _ in range(100):
        sim.step()
        assert sim.kinetic_energy() < 1e-6


def test_translating_pair_loses_energy():
    """A rigidly moving pair only loses kinetic energy to damping."""
    positions = [(300.0, 300.0), (340.0, 300.0)]
    velocities = [(3.0, 1.0), (3.0, 1.0)]
    sim = make_sim(positions, velocities, rest_length=40.0)

    energy = sim.kinetic_energy()
    for _ in range(30):
        sim.step()
        new_energy = sim.kinetic_energy()
        assert new_energy <= energy * (1 + 1e-5)
        energy = new_energy


def test_dragged_node_untouched_by_step():
    sim = Simulation(SimConfig(num_nodes=3, gravity=True, pin_first_node=False, seed=4))
    q = sim.positions()
    sim.controller.pointer_down(*q[2])

    for _ in range(10):
        sim.step()
    assert np.array_equal(sim.positions()[2], q[2])
    assert np.array_equal(sim.velocities()[2], [0.0, 0.0])


def test_empty_simulation_is_harmless():
    sim = Simulation(SimConfig(num_nodes=0))

    sim.step()
    assert sim.num_nodes == 0
    assert sim.edges() == []
    assert sim.positions().shape == (0, 2)
    assert sim.kinetic_energy() == 0.0
    assert sim.controller.pointer_down(10.0, 10.0) is None


def test_edge_strains_follow_edges():
    sim = Simulation(SimConfig(num_nodes=5, topology='fully_connected', seed=5))
    sim.step()

    strains = sim.edge_strains()
    assert len(strains) == len(sim.edges()) == 10
    assert np.all(np.abs(strains) <= 1.0)
