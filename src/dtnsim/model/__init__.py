"""Domain model: message identity and the spatial grid index."""

from dtnsim.model.grid import CELL_SIZE, Cell, GridNotBuiltError, SpatialGridIndex, cell_for
from dtnsim.model.message import DELIMITER, Message

__all__ = [
    "CELL_SIZE",
    "DELIMITER",
    "Cell",
    "GridNotBuiltError",
    "Message",
    "SpatialGridIndex",
    "cell_for",
]
