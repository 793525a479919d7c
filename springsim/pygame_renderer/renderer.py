"""
Pygame Renderer for spring networks

Draws what Simulation exposes every frame: node positions (screen space,
+y down) and canonical spring pairs, plus HUD text and a strain color key.

Usage:
    from springsim.pygame_renderer import Renderer

    renderer = Renderer(window_width=1000, window_height=700)

    # In render loop:
    canvas = renderer.create_canvas()
    renderer.draw_grid(canvas)
    renderer.draw_springs(canvas, sim.edges(), sim.positions(), sim.edge_strains())
    renderer.draw_particles(canvas, sim.positions(), pinned=sim.pinned, dragged=sim.dragged_index)
    renderer.draw_strain_key(canvas, sim.solver.strain_scale)
    renderer.draw_info_text(canvas, [("k = 2.0", renderer.BLACK)])
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pygame


class Renderer:
    """
    Pygame renderer for spring network visualization.

    All methods draw onto a pygame Surface and take numpy arrays; nothing here
    touches simulation state.
    """

    # ========================================================================
    # COLOR CONSTANTS
    # ========================================================================

    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    GREY = (100, 100, 100)
    LIGHT_GREY = (230, 230, 230)

    # Node colors
    PARTICLE_FILL = (50, 50, 255)   # Blue
    PARTICLE_OUTLINE = (0, 0, 0)    # Black
    PINNED_FILL = (200, 30, 30)     # Red
    DRAGGED_FILL = (255, 105, 180)  # Hot pink

    # Spring: Orange (compression) -> Yellow (rest) -> Red (tension)
    SPRING_COLORS = [(255, 165, 0), (255, 255, 0), (255, 0, 0)]

    # ========================================================================
    # INITIALIZATION
    # ========================================================================

    def __init__(
        self,
        window_width: int = 1000,
        window_height: int = 700,
        grid_spacing: int = 50,
        particle_outline: int = 2,
        spring_min_width: int = 2,
        spring_max_width: int = 6,
        font_size: int = 24,
        font_size_small: int = 18,
    ):
        """
        Initialize the renderer.

        Args:
            window_width: Window width in pixels
            window_height: Window height in pixels
            grid_spacing: Background grid spacing in pixels (0 disables the grid)
            particle_outline: Outline thickness added around each node
            spring_min_width: Spring line width at rest
            spring_max_width: Spring line width at full normalized strain
            font_size: Main font size
            font_size_small: Small font size for labels
        """
        self.window_width = window_width
        self.window_height = window_height
        self.grid_spacing = grid_spacing

        self.particle_outline = particle_outline
        self.spring_min_width = spring_min_width
        self.spring_max_width = spring_max_width

        # Fonts (initialized lazily)
        self._font = None
        self._font_small = None
        self._font_size = font_size
        self._font_size_small = font_size_small

    @property
    def font(self):
        """Lazy font initialization."""
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, self._font_size)
        return self._font

    @property
    def font_small(self):
        """Lazy small font initialization."""
        if self._font_small is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font_small = pygame.font.Font(None, self._font_size_small)
        return self._font_small

    def resize(self, window_width: int, window_height: int):
        self.window_width = window_width
        self.window_height = window_height

    # ========================================================================
    # CANVAS
    # ========================================================================

    def create_canvas(self, background_color=None) -> pygame.Surface:
        """
        Create a new canvas (pygame Surface) with background color.

        Args:
            background_color: RGB tuple or None for white
        """
        canvas = pygame.Surface((self.window_width, self.window_height))
        canvas.fill(background_color or self.WHITE)
        return canvas

    def draw_grid(self, canvas: pygame.Surface, color=None):
        """Draw background grid lines every grid_spacing pixels."""
        if self.grid_spacing <= 0:
            return
        color = color or self.LIGHT_GREY

        for x_pos in range(0, self.window_width + 1, self.grid_spacing):
            pygame.draw.line(canvas, color, (x_pos, 0), (x_pos, self.window_height), 1)

        for y_pos in range(0, self.window_height + 1, self.grid_spacing):
            pygame.draw.line(canvas, color, (0, y_pos), (self.window_width, y_pos), 1)

    # ========================================================================
    # SPRINGS
    # ========================================================================

    def draw_springs(
        self,
        canvas: pygame.Surface,
        edges: Sequence[Tuple[int, int]],
        positions: np.ndarray,
        strains: Optional[np.ndarray] = None,
    ):
        """
        Draw springs with strain-based coloring.

        Args:
            canvas: pygame Surface to draw on
            edges: (i, j) node index pairs, one per spring
            positions: Array of shape (N, 2) with node positions
            strains: Normalized strain values in [-1, 1] per spring, or None
        """
        if edges is None or len(edges) == 0:
            return

        pairs = np.asarray(edges, dtype=np.int32).reshape(-1, 2)
        num_springs = len(pairs)

        if strains is not None and len(strains) == num_springs:
            colors, thicknesses = self._compute_spring_visuals(np.asarray(strains, dtype=np.float32))
        else:
            colors = np.full((num_springs, 3), self.SPRING_COLORS[1], dtype=np.uint8)
            thicknesses = np.full(num_springs, self.spring_min_width, dtype=np.int32)

        start = np.asarray(positions)[pairs[:, 0]]
        end = np.asarray(positions)[pairs[:, 1]]

        for k in range(num_springs):
            if not (np.all(np.isfinite(start[k])) and np.all(np.isfinite(end[k]))):
                continue
            pygame.draw.line(
                canvas,
                tuple(int(c) for c in colors[k]),
                (int(start[k][0]), int(start[k][1])),
                (int(end[k][0]), int(end[k][1])),
                int(thicknesses[k]),
            )

    def _compute_spring_visuals(self, normalized_strains: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute spring colors and thicknesses from normalized strain data.

        Returns:
            colors: RGB color array shape (N, 3)
            thicknesses: Line thickness array shape (N,)
        """
        # Map [-1, 1] to [0, 1] for color interpolation
        t_values = (np.clip(normalized_strains, -1.0, 1.0) + 1.0) / 2.0

        colors = np.array([self.strain_color(t) for t in t_values], dtype=np.uint8)

        abs_strains = np.abs(normalized_strains)
        thickness_range = self.spring_max_width - self.spring_min_width
        thicknesses = np.clip(
            self.spring_min_width + (abs_strains * thickness_range).astype(int),
            self.spring_min_width,
            self.spring_max_width,
        )

        return colors, thicknesses

    # ========================================================================
    # NODES
    # ========================================================================

    def draw_particles(
        self,
        canvas: pygame.Surface,
        positions: np.ndarray,
        radius: float = 4.0,
        pinned: Iterable[int] = (),
        dragged: Optional[int] = None,
    ):
        """
        Draw nodes as outlined circles.

        Args:
            canvas: pygame Surface to draw on
            positions: Array of shape (N, 2) with node positions
            radius: Node radius in pixels
            pinned: Indices drawn in the pinned color
            dragged: Index drawn in the dragged color
        """
        pinned = set(pinned)
        fill_radius = max(int(round(radius)), 1)
        outline_radius = fill_radius + self.particle_outline

        for i, pos in enumerate(positions):
            if np.isnan(pos[0]) or np.isnan(pos[1]):
                continue

            if i == dragged:
                fill = self.DRAGGED_FILL
            elif i in pinned:
                fill = self.PINNED_FILL
            else:
                fill = self.PARTICLE_FILL

            screen_pos = (int(pos[0]), int(pos[1]))
            pygame.draw.circle(canvas, self.PARTICLE_OUTLINE, screen_pos, outline_radius)
            pygame.draw.circle(canvas, fill, screen_pos, fill_radius)

    # ========================================================================
    # HUD
    # ========================================================================

    def draw_strain_key(
        self,
        canvas: pygame.Surface,
        strain_scale: float = 0.01,
        origin: Optional[Tuple[int, int]] = None,
        size: Tuple[int, int] = (120, 10),
    ):
        """
        Horizontal strain color key, compressed on the left and stretched on
        the right, with the strain that saturates the colors printed below.

        Sits in the bottom-right corner unless ``origin`` is given.
        """
        bar_w, bar_h = size
        if origin is None:
            origin = (self.window_width - bar_w - 15, self.window_height - bar_h - 30)
        x0, y0 = origin

        for dx in range(bar_w):
            color = self.strain_color(dx / max(bar_w - 1, 1))
            pygame.draw.line(canvas, color, (x0 + dx, y0), (x0 + dx, y0 + bar_h - 1))
        pygame.draw.rect(canvas, self.GREY, (x0 - 1, y0 - 1, bar_w + 2, bar_h + 2), 1)

        pct = 100.0 * strain_scale
        label = f"strain ±{pct:.1f}%" if pct < 1 else f"strain ±{pct:.0f}%"
        canvas.blit(self.font_small.render(label, True, self.GREY), (x0, y0 + bar_h + 4))

    def draw_info_text(
        self,
        canvas: pygame.Surface,
        lines: List[Tuple[str, Tuple[int, int, int]]],
        position: Tuple[int, int] = (10, 10),
        line_spacing: int = 17,
    ):
        """
        Draw multiple lines of info text.

        Args:
            canvas: pygame Surface to draw on
            lines: List of (text, color) tuples
            position: Top-left position
            line_spacing: Vertical spacing between lines
        """
        x, y = position

        for i, (text, color) in enumerate(lines):
            text_surface = self.font_small.render(text, True, color)
            canvas.blit(text_surface, (x, y + i * line_spacing))

    # ========================================================================
    # COLOR UTILITIES
    # ========================================================================

    def strain_color(self, t: float) -> Tuple[int, int, int]:
        """Spring color at t in [0, 1]: compressed, rest and stretched at 0, 0.5 and 1."""
        t = min(max(float(t), 0.0), 1.0)
        if t < 0.5:
            lo, hi, u = self.SPRING_COLORS[0], self.SPRING_COLORS[1], 2.0 * t
        else:
            lo, hi, u = self.SPRING_COLORS[1], self.SPRING_COLORS[2], 2.0 * t - 1.0
        return tuple(int(a + (b - a) * u) for a, b in zip(lo, hi))
