"""Projection of simulation state into renderable frames."""

from dtnsim.projection.projector import Frame, NodeVisual, frame_to_dict, project

__all__ = ["Frame", "NodeVisual", "frame_to_dict", "project"]
