"""
Pygame Renderer for spring networks.

Main classes:
- Renderer: pygame drawing helpers for nodes, springs, strain key and HUD text
"""

from .renderer import Renderer

__all__ = ['Renderer']
