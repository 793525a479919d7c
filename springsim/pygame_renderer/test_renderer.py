"""
Tests for the pygame Renderer (headless, dummy SDL video driver).
"""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np
import pygame

from springsim.pygame_renderer import Renderer


def make_renderer():
    return Renderer(window_width=200, window_height=100, grid_spacing=0,
                    spring_min_width=1, spring_max_width=1)


def test_strain_color_ramp():
    renderer = make_renderer()
    assert renderer.strain_color(0.0) == Renderer.SPRING_COLORS[0]
    assert renderer.strain_color(0.5) == Renderer.SPRING_COLORS[1]
    assert renderer.strain_color(1.0) == Renderer.SPRING_COLORS[2]
    # Out-of-range values saturate
    assert renderer.strain_color(-3.0) == Renderer.SPRING_COLORS[0]
    assert renderer.strain_color(7.0) == Renderer.SPRING_COLORS[2]


def test_canvas_background():
    renderer = make_renderer()
    canvas = renderer.create_canvas()

    assert canvas.get_size() == (200, 100)
    assert tuple(canvas.get_at((5, 5)))[:3] == Renderer.WHITE


def test_spring_without_strain_is_rest_color():
    renderer = make_renderer()
    canvas = renderer.create_canvas()
    positions = np.array([[20.0, 50.0], [180.0, 50.0]])

    renderer.draw_springs(canvas, [(0, 1)], positions)
    assert tuple(canvas.get_at((100, 50)))[:3] == Renderer.SPRING_COLORS[1]


def test_spring_tension_color():
    renderer = make_renderer()
    canvas = renderer.create_canvas()
    positions = np.array([[20.0, 50.0], [180.0, 50.0]])

    renderer.draw_springs(canvas, [(0, 1)], positions, np.array([1.0]))
    assert tuple(canvas.get_at((100, 50)))[:3] == Renderer.SPRING_COLORS[2]


def test_node_fill_colors():
    renderer = make_renderer()
    canvas = renderer.create_canvas()
    positions = np.array([[30.0, 50.0], [100.0, 50.0], [170.0, 50.0], [np.nan, 10.0]])

    renderer.draw_particles(canvas, positions, radius=4.0, pinned={0}, dragged=2)

    assert tuple(canvas.get_at((30, 50)))[:3] == Renderer.PINNED_FILL
    assert tuple(canvas.get_at((100, 50)))[:3] == Renderer.PARTICLE_FILL
    assert tuple(canvas.get_at((170, 50)))[:3] == Renderer.DRAGGED_FILL


def test_text_and_strain_key_draw():
    pygame.font.init()
    renderer = make_renderer()
    canvas = renderer.create_canvas()

    renderer.draw_strain_key(canvas, 0.05, origin=(20, 40), size=(120, 10))
    renderer.draw_info_text(canvas, [("k = 2.0", Renderer.BLACK), ("", Renderer.GREY)])

    # Compressed end on the left, stretched end on the right
    assert tuple(canvas.get_at((20, 45)))[:3] == Renderer.SPRING_COLORS[0]
    assert tuple(canvas.get_at((139, 45)))[:3] == Renderer.SPRING_COLORS[2]
