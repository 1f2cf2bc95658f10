"""Recursive binary-split layout of dashboard panes.

Panes are arranged into a balanced tree of splits by repeatedly halving the
index range ``[0, next_power_of_two(n) - 1]``. Ranges that start past the
last real pane are pruned, so a lone trailing pane is placed on its own
rather than next to an empty sibling.

For example, five panes produce the calls::

    [0, 7] -> [0, 3] -> [0, 1], [2, 3]
           -> [4, 7] -> [4, 5]            ([6, 7] is pruned)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Orientation(str, Enum):
    """How the two children of a split share the space."""

    STACKED = "stacked"
    SIDE_BY_SIDE = "side-by-side"

    def flipped(self) -> "Orientation":
        if self is Orientation.STACKED:
            return Orientation.SIDE_BY_SIDE
        return Orientation.STACKED


@dataclass(frozen=True)
class Split:
    """Internal layout node holding exactly two children."""

    orientation: Orientation
    first: Any
    second: Any


class NoWidgetsError(ValueError):
    """Raised when a layout is requested for an empty pane list."""


def next_power_of_two(n: int) -> int:
    """Smallest power of two that is >= n (1 for n <= 1)."""
    power = 1
    while power < n:
        power <<= 1
    return power


def split_orientation(range_size: int, tile: bool, base: Orientation) -> Orientation:
    """Orientation of a split covering ``range_size`` (a power of two) slots.

    In tile mode the orientation flips whenever the exponent of the range
    size is odd, alternating by depth to produce a grid.
    """
    if tile and (range_size.bit_length() - 1) % 2 == 1:
        return base.flipped()
    return base


def layout(
    widgets: Sequence[Any],
    tile: bool = False,
    orientation: Orientation = Orientation.STACKED,
) -> Any:
    """Arrange panes into a tree of splits.

    Args:
        widgets: Pane handles in display order
        tile: Alternate split orientation by depth
        orientation: Base split orientation

    Returns:
        The lone handle for a single pane, otherwise the root Split

    Raises:
        NoWidgetsError: If ``widgets`` is empty
    """
    if not widgets:
        raise NoWidgetsError("No widgets selected")
    if len(widgets) == 1:
        return widgets[0]

    last = next_power_of_two(len(widgets)) - 1
    root = _layout_range(widgets, 0, last, tile, orientation)
    logger.info(f"Layout built: {len(widgets)} panes, depth={depth(root)}, tile={tile}, orientation={orientation.value}")
    return root


def _layout_range(
    widgets: Sequence[Any],
    start: int,
    end: int,
    tile: bool,
    base: Orientation,
) -> Any:
    size = end - start + 1
    orientation = split_orientation(size, tile, base)

    if start + 1 == end:
        if end >= len(widgets):
            return widgets[start]
        return Split(orientation, widgets[start], widgets[end])

    # e.g. [4, 7] splits into [4, 5] and [6, 7]
    left_end = start + size // 2 - 1
    right_start = left_end + 1

    first = _layout_range(widgets, start, left_end, tile, base)
    if right_start >= len(widgets):
        return first

    second = _layout_range(widgets, right_start, end, tile, base)
    return Split(orientation, first, second)


def leaves(node: Any) -> list[Any]:
    """Pane handles of a layout tree in left-to-right order."""
    if isinstance(node, Split):
        return leaves(node.first) + leaves(node.second)
    return [node]


def depth(node: Any) -> int:
    """Number of split levels above the deepest pane."""
    if isinstance(node, Split):
        return 1 + max(depth(node.first), depth(node.second))
    return 0
