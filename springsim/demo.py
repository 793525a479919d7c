#!/usr/bin/env python3
"""
Interactive spring network demo

Hosts a Simulation in a pygame window: one physics step per displayed
frame, pointer/keyboard events routed to the interaction controller, and
keyboard shortcuts for the simulation parameters.

Usage:
    springsim-demo                         # hanging chain, node 0 pinned
    springsim-demo --preset shape          # fully connected
    springsim-demo --preset rope -n 12     # rope (mass/gravity/topology locked)
    python -m springsim.demo --no-gravity -k 4

Author: NBEL
License: Apache-2.0
"""

import argparse
import time
from typing import Any, Dict, Optional

import numpy as np
import pygame

from springsim.config import (
    MASS_RANGE,
    NODE_COUNT_RANGE,
    REST_LENGTH_RANGE,
    STIFFNESS_RANGE,
    STIFFNESS_STEP,
    SimConfig,
)
from springsim.pygame_renderer import Renderer
from springsim.sim import TopologyMode
from springsim.simulation import Simulation


DIRECTIONS = [
    "Hold SHIFT and click to toggle a point as stationary.",
    "Click and drag to drag a point.",
    "Releasing while in motion adds velocity to the point.",
    "If the shape/spring becomes unstable, bring k all the way down",
    "and slowly increase it.",
]

CONTROLS = [
    "UP/DOWN  k        LEFT/RIGHT  spring length",
    "+/-      nodes    [ / ]       mass",
    "G gravity  T shape  X randomize  R reset",
    "SPACE pause  H help  Q/ESC quit",
]


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


class SpringDemo:
    """
    Window loop around a Simulation.

    Subclasses may override:
        - get_info_lines(): HUD text
        - draw_custom(): extra drawing on top of the scene
    """

    def __init__(self, config: Optional[SimConfig] = None, fps: int = 60):
        """
        Initialize the demo.

        Args:
            config: Simulation configuration (uses defaults if None)
            fps: Target frame rate; one physics step is taken per frame
        """
        self.config = config or SimConfig(verbose=True)
        self.fps = fps

        # Will be initialized in setup()
        self.sim: Optional[Simulation] = None
        self.renderer: Optional[Renderer] = None
        self.window: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None

        self.paused: bool = False
        self.running: bool = True
        self.show_help: bool = True

    def get_demo_name(self) -> str:
        # The simulation keeps its own copy of the config with live values
        cfg = self.sim.config if self.sim is not None else self.config
        if cfg.locked:
            return "Rope"
        if TopologyMode.parse(cfg.topology) is TopologyMode.FULLY_CONNECTED:
            return "Spring Shape"
        return "Spring Chain"

    def get_info_lines(self) -> list:
        """
        HUD lines as (text, color) tuples.

        Returns:
            List of (text, color) tuples
        """
        sim = self.sim
        black = Renderer.BLACK
        grey = Renderer.GREY

        lines = [
            (self.get_demo_name(), black),
            (f"k = {sim.model.stiffness:.1f}", black),
            (f"Spring length = {sim.model.rest_length:.0f}", black),
            (f"Nodes = {sim.num_nodes}   Springs = {sim.model.edge_count}", black),
        ]
        if not self.config.is_locked('mass'):
            lines.append((f"Mass = {sim.model.mass:.0f}", black))
        if not self.config.is_locked('gravity'):
            lines.append((f"Gravity: {'on' if sim.model.gravity_enabled else 'off'}", black))
        lines.append((f"KE = {sim.kinetic_energy():.1f}", grey))
        if self.paused:
            lines.append(("PAUSED", (200, 30, 30)))

        if self.show_help:
            lines.append(("", black))
            lines.extend((text, grey) for text in DIRECTIONS)
            lines.append(("", black))
            lines.extend((text, grey) for text in CONTROLS)

        return lines

    def draw_custom(self, canvas: pygame.Surface) -> None:
        pass

    def get_summary(self) -> Dict[str, Any]:
        return {
            'frames': self.sim.frame,
            'nodes': self.sim.num_nodes,
            'kinetic_energy': self.sim.kinetic_energy(),
        }

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def setup(self) -> None:
        """Create the simulation, the window and the renderer."""
        cfg = self.config

        print("=" * 70)
        print(self.get_demo_name())
        print("=" * 70)
        print()

        print("Creating simulation...")
        self.sim = Simulation(cfg)
        print(f"  Device: {self.sim.model.device}")
        print(f"  Pinned: {sorted(self.sim.pinned)}")
        print()

        pygame.init()
        pygame.display.set_caption(f"springsim - {self.get_demo_name()}")
        self.window = pygame.display.set_mode((int(cfg.width), int(cfg.height)), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()

        self.renderer = Renderer(window_width=int(cfg.width), window_height=int(cfg.height))

    def step(self) -> None:
        """Execute one simulation step."""
        self.sim.step()

    def render(self) -> None:
        """Render the current frame."""
        if self.window is None:
            return

        sim = self.sim
        positions = sim.positions()

        canvas = self.renderer.create_canvas()
        self.renderer.draw_grid(canvas)
        self.renderer.draw_springs(canvas, sim.edges(), positions, sim.edge_strains())
        self.renderer.draw_particles(
            canvas, positions, radius=sim.radius, pinned=sim.pinned, dragged=sim.dragged_index
        )
        self.renderer.draw_strain_key(canvas, sim.solver.strain_scale)
        self.renderer.draw_info_text(canvas, self.get_info_lines())

        self.draw_custom(canvas)

        self.window.blit(canvas, canvas.get_rect())
        pygame.display.flip()

    # ========================================================================
    # EVENTS
    # ========================================================================

    def handle_events(self) -> None:
        """Handle pygame events."""
        controller = self.sim.controller

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.handle_resize(event.w, event.h)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                controller.pointer_down(*event.pos)

            elif event.type == pygame.MOUSEMOTION:
                controller.pointer_move(*event.pos)

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                controller.pointer_up()

            elif event.type == pygame.KEYUP:
                if event.key in (pygame.K_LSHIFT, pygame.K_RSHIFT):
                    controller.key_up('shift')

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_LSHIFT, pygame.K_RSHIFT):
                    controller.key_down('shift')
                else:
                    self.handle_key(event.key)

    def handle_resize(self, width: int, height: int) -> bool:
        """
        Resize the window, renderer and simulation bounds together.

        Returns:
            False if the size was ignored (minimized windows report 0 x 0)
        """
        if width <= 0 or height <= 0:
            return False

        self.window = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.renderer.resize(width, height)
        self.sim.set_bounds(width, height)
        return True

    def handle_key(self, key: int) -> None:
        sim = self.sim
        cfg = self.config

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False
        elif key == pygame.K_SPACE:
            self.paused = not self.paused
            print("Paused" if self.paused else "Resumed")
        elif key == pygame.K_h:
            self.show_help = not self.show_help
        elif key == pygame.K_r:
            sim.reset()
        elif key == pygame.K_x:
            sim.randomize()

        elif key == pygame.K_UP:
            k = round(sim.model.stiffness + STIFFNESS_STEP, 1)
            sim.set_stiffness(_clamp(k, *STIFFNESS_RANGE))
        elif key == pygame.K_DOWN:
            k = round(sim.model.stiffness - STIFFNESS_STEP, 1)
            sim.set_stiffness(_clamp(k, *STIFFNESS_RANGE))
        elif key == pygame.K_RIGHT:
            sim.set_rest_length(_clamp(sim.model.rest_length + 5.0, *REST_LENGTH_RANGE))
        elif key == pygame.K_LEFT:
            sim.set_rest_length(_clamp(sim.model.rest_length - 5.0, *REST_LENGTH_RANGE))
        elif key in (pygame.K_EQUALS, pygame.K_PLUS, pygame.K_KP_PLUS):
            sim.set_node_count(_clamp(sim.num_nodes + 1, *NODE_COUNT_RANGE))
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            sim.set_node_count(_clamp(sim.num_nodes - 1, *NODE_COUNT_RANGE))

        elif key == pygame.K_RIGHTBRACKET and not cfg.is_locked('mass'):
            sim.set_mass(_clamp(sim.model.mass + 10.0, *MASS_RANGE))
        elif key == pygame.K_LEFTBRACKET and not cfg.is_locked('mass'):
            sim.set_mass(_clamp(sim.model.mass - 10.0, *MASS_RANGE))
        elif key == pygame.K_g and not cfg.is_locked('gravity'):
            sim.set_gravity(not sim.model.gravity_enabled)
        elif key == pygame.K_t and not cfg.is_locked('topology'):
            if sim.model.topology is TopologyMode.CHAIN:
                sim.set_topology_mode(TopologyMode.FULLY_CONNECTED)
            else:
                sim.set_topology_mode(TopologyMode.CHAIN)

    # ========================================================================
    # MAIN LOOP
    # ========================================================================

    def run(self, duration: Optional[float] = None) -> Dict[str, Any]:
        """
        Run until the window is closed (or for ``duration`` seconds).

        Returns:
            Summary dictionary
        """
        self.setup()

        print("=" * 70)
        print("SIMULATION STARTED")
        print("=" * 70)
        for line in DIRECTIONS + CONTROLS:
            print(f"  {line}")
        print()

        start_time = time.time()
        frames = 0

        while self.running:
            if duration is not None and time.time() - start_time >= duration:
                break

            self.handle_events()

            if not self.paused:
                self.step()
                frames += 1

                if frames % 300 == 0:
                    fps = frames / max(time.time() - start_time, 0.01)
                    positions = self.sim.positions()
                    cy = float(np.mean(positions[:, 1])) if len(positions) else 0.0
                    print(f"frame={self.sim.frame} | KE={self.sim.kinetic_energy():.2f} | "
                          f"mean y={cy:.1f} | fps={fps:.1f}")

            self.render()
            self.clock.tick(self.fps)

        summary = self.get_summary()

        print()
        print("=" * 70)
        print("SIMULATION COMPLETE")
        print("=" * 70)
        print(f"  Frames: {summary['frames']}")
        print(f"  Nodes: {summary['nodes']}")
        print(f"  Kinetic energy: {summary['kinetic_energy']:.3f}")
        print()

        pygame.quit()

        return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Interactive spring network demo')
    SimConfig.add_common_args(parser)
    parser.add_argument('--fps', type=int, default=60,
                        help='Target frame rate (default: 60)')
    parser.add_argument('--duration', '-t', type=float, default=None,
                        help='Stop after this many seconds (default: run until closed)')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = SimConfig.config_from_args(args)
    except ValueError as e:
        parser.error(str(e))
    SpringDemo(config, fps=args.fps).run(duration=args.duration)


if __name__ == "__main__":
    main()
