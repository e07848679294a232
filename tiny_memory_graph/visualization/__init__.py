"""Graph visualization module."""

from .pyvis_visualizer import PyVisVisualizer

__all__ = ["PyVisVisualizer"]
