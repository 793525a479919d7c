# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0
#
# Per-node force, integration and boundary kernels for the frame-step solver

import warp as wp


# Per-node interaction flags (uploaded every tick)
PARTICLE_FREE = wp.constant(0)
PARTICLE_PINNED = wp.constant(1)
PARTICLE_DRAGGED = wp.constant(2)


@wp.kernel
def eval_node_forces_2d(
    x: wp.array(dtype=wp.vec2),
    mass: wp.array(dtype=float),
    adj_offsets: wp.array(dtype=int),
    adj_indices: wp.array(dtype=int),
    stiffness: float,
    rest_length: float,
    gravity: float,        # g / gravity_dampen, 0 when gravity is off
    force_damping: float,
    f: wp.array(dtype=wp.vec2),
):
    """
    Evaluate the net force on each node.

    Each thread owns one node and gathers over its neighbors, so the result
    for node i depends only on current positions and parameters.

    Spring term per neighbor j: the vector (-k, 0) rotated by
    atan2(dy, dx) of (x_i - x_j), scaled by (|x_i - x_j| - rest_length).
    The total (gravity + springs) is damped once.
    """
    tid = wp.tid()

    xi = x[tid]
    force = wp.vec2(0.0, gravity * mass[tid])

    for n in range(adj_offsets[tid], adj_offsets[tid + 1]):
        j = adj_indices[n]
        d = xi - x[j]

        theta = wp.atan2(d[1], d[0])
        stretch = wp.length(d) - rest_length

        k_vec = wp.vec2(-stiffness * wp.cos(theta), -stiffness * wp.sin(theta))
        force = force + k_vec * stretch

    f[tid] = force * force_damping


@wp.kernel
def integrate_nodes_2d(
    x: wp.array(dtype=wp.vec2),
    v: wp.array(dtype=wp.vec2),
    f: wp.array(dtype=wp.vec2),
    inv_mass: wp.array(dtype=float),
    flags: wp.array(dtype=int),
    velocity_damping: float,
    x_new: wp.array(dtype=wp.vec2),
    v_new: wp.array(dtype=wp.vec2),
):
    """
    One frame of integration; the frame itself is the time unit.

    v += f / m
    x += v
    v *= velocity_damping

    Pinned nodes keep their position and lose all velocity.
    Dragged nodes are copied through untouched.
    """
    tid = wp.tid()

    flag = flags[tid]
    if flag == PARTICLE_PINNED:
        x_new[tid] = x[tid]
        v_new[tid] = wp.vec2(0.0, 0.0)
        return
    if flag == PARTICLE_DRAGGED:
        x_new[tid] = x[tid]
        v_new[tid] = v[tid]
        return

    vel = v[tid] + f[tid] * inv_mass[tid]

    x_new[tid] = x[tid] + vel
    v_new[tid] = vel * velocity_damping


@wp.kernel
def apply_boundary_2d(
    x: wp.array(dtype=wp.vec2),
    v: wp.array(dtype=wp.vec2),
    flags: wp.array(dtype=int),
    radius: float,
    width: float,
    height: float,
    restitution: float,
):
    """
    Inelastic bounce against the canvas edges.

    Each axis is checked independently: a node whose disc crosses an edge is
    clamped to touch it and that velocity component is reversed and scaled
    by restitution.

    Pinned nodes are clamped too (their velocity is already zero), so a
    shrinking canvas pulls them back inside. Dragged nodes follow the pointer.
    """
    tid = wp.tid()

    if flags[tid] == PARTICLE_DRAGGED:
        return

    pos = x[tid]
    vel = v[tid]

    px = pos[0]
    py = pos[1]
    vx = vel[0]
    vy = vel[1]

    # X dimension
    if px + radius > width:
        px = width - radius
        vx = -vx * restitution
    elif px - radius < 0.0:
        px = radius
        vx = -vx * restitution

    # Y dimension
    if py + radius > height:
        py = height - radius
        vy = -vy * restitution
    elif py - radius < 0.0:
        py = radius
        vy = -vy * restitution

    x[tid] = wp.vec2(px, py)
    v[tid] = wp.vec2(vx, vy)


# ============================================================================
# High-level wrapper functions
# ============================================================================

def eval_node_forces(model, state, particle_f: wp.array, force_damping: float):
    """
    Evaluate gravity + spring forces for every node (wrapper function).

    Args:
        model: The Model containing topology and force parameters
        state: The State whose positions are read
        particle_f: Output force array, shape [particle_count]
        force_damping: Factor applied once to each node's total force
    """
    if model.particle_count == 0:
        return

    gravity = model.gravity / model.gravity_dampen if model.gravity_enabled else 0.0

    wp.launch(
        kernel=eval_node_forces_2d,
        dim=model.particle_count,
        inputs=[
            state.particle_q,
            model.particle_mass,
            model.adj_offsets,
            model.adj_indices,
            model.stiffness,
            model.rest_length,
            gravity,
            force_damping,
        ],
        outputs=[particle_f],
        device=model.device,
    )
