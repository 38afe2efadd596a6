"""Pillow rendering for packed day timelines."""

from .renderer import DEFAULT_EVENT_COLOR, RendererConfig, TimelineRenderer

__all__ = [
    "DEFAULT_EVENT_COLOR",
    "RendererConfig",
    "TimelineRenderer",
]
