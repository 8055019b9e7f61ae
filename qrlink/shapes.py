# -*- coding: utf-8 -*-
"""
QR Code Shapes Module

Pure geometry for styled QR codes: path fragments for data modules, the three
layer finder pattern ("eye") primitives, and predicates that locate finder
patterns and their separators in the module grid.

All coordinates use module units (1 unit = 1 module) so fragments for every
dark module concatenate into a single SVG path.

Functions:
    module_path: Path fragment for one data module
    finder_pattern_fragments: Ordered primitives for one finder pattern
    finder_pattern_origins: Top-left grid anchors of the three finder patterns
    is_finder_pattern: True if (row, col) lies in a 7x7 corner finder
    is_finder_separator: True if (row, col) lies in a finder's separator ring
"""

from typing import List, Tuple

from .svg_document import Circle, Element, Rect, fmt

FINDER_SIZE = 7


def module_path(shape: str, x: float, y: float, size: float) -> str:
    """
    Build the SVG path fragment for a single data module.

    Every shape stays inside the cell [x, x+size] x [y, y+size] and touches
    all four of its edges.

    Args:
        shape (str): 'square', 'rounded', 'dots' or 'diamond' (unknown -> square)
        x (float): Left edge of the cell
        y (float): Top edge of the cell
        size (float): Cell side length

    Returns:
        str: Closed path fragment

    Example:
        >>> module_path('square', 4, 5, 1)
        'M4,5h1v1h-1Z'
    """
    s = fmt(size)
    if shape == 'rounded':
        r = size * 0.3
        side = fmt(size - 2 * r)
        rr = fmt(r)
        return (
            f"M{fmt(x + r)},{fmt(y)}h{side}"
            f"a{rr},{rr} 0 0 1 {rr},{rr}v{side}"
            f"a{rr},{rr} 0 0 1 -{rr},{rr}h-{side}"
            f"a{rr},{rr} 0 0 1 -{rr},-{rr}v-{side}"
            f"a{rr},{rr} 0 0 1 {rr},-{rr}Z"
        )
    if shape == 'dots':
        radius = size / 2
        rr = fmt(radius)
        # two half arcs from the left edge midpoint, closed
        return (
            f"M{fmt(x)},{fmt(y + radius)}"
            f"a{rr},{rr} 0 1,0 {s},0"
            f"a{rr},{rr} 0 1,0 -{s},0Z"
        )
    if shape == 'diamond':
        half = size / 2
        return (
            f"M{fmt(x + half)},{fmt(y)}L{fmt(x + size)},{fmt(y + half)}"
            f"L{fmt(x + half)},{fmt(y + size)}L{fmt(x)},{fmt(y + half)}Z"
        )
    return f"M{fmt(x)},{fmt(y)}h{s}v{s}h-{s}Z"


def finder_pattern_fragments(shape: str, x: float, y: float, module_size: float,
                             fg: str, bg: str) -> List[Element]:
    """
    Build the three concentric layers of one finder pattern.

    Layers are returned outer (7x7, fg) -> middle (5x5, bg) -> inner (3x3, fg)
    so each later layer paints over the previous one.

    Args:
        shape (str): 'square', 'rounded' or 'circle' (unknown -> square)
        x (float): Left edge of the 7x7 block
        y (float): Top edge of the 7x7 block
        module_size (float): Side of one module
        fg (str): Foreground color
        bg (str): Background color

    Returns:
        List[Element]: Exactly three drawing primitives
    """
    m = module_size
    if shape == 'circle':
        cx = x + 3.5 * m
        cy = y + 3.5 * m
        return [
            Circle(cx, cy, 3.5 * m, fill=fg),
            Circle(cx, cy, 2.5 * m, fill=bg),
            Circle(cx, cy, 1.5 * m, fill=fg),
        ]

    rounded = shape == 'rounded'
    return [
        Rect(x, y, 7 * m, 7 * m, fill=fg, rx=1.5 * m if rounded else None),
        Rect(x + m, y + m, 5 * m, 5 * m, fill=bg, rx=1 * m if rounded else None),
        Rect(x + 2 * m, y + 2 * m, 3 * m, 3 * m, fill=fg, rx=0.5 * m if rounded else None),
    ]


def finder_pattern_origins(size: int) -> List[Tuple[int, int]]:
    """(row, col) of the top-left module of each finder: top-left, top-right, bottom-left."""
    return [(0, 0), (0, size - FINDER_SIZE), (size - FINDER_SIZE, 0)]


def is_finder_pattern(row: int, col: int, size: int) -> bool:
    """
    Check whether a module belongs to one of the three finder patterns.

    The bottom-right corner never holds a finder pattern.
    """
    if not (0 <= row < size and 0 <= col < size):
        return False
    top = row <= 6
    bottom = row >= size - 7
    left = col <= 6
    right = col >= size - 7
    return (top and left) or (top and right) or (bottom and left)


def is_finder_separator(row: int, col: int, size: int) -> bool:
    """
    Check whether a module lies on the one-module light ring around a finder.

    Each ring is L-shaped (15 modules): row 7 / column 7 for the top-left
    finder, row 7 / column size-8 for the top-right one, and row size-8 /
    column 7 for the bottom-left one.
    """
    if not (0 <= row < size and 0 <= col < size):
        return False
    # Top-left
    if (row == 7 and col <= 7) or (col == 7 and row <= 7):
        return True
    # Top-right
    if (row == 7 and col >= size - 8) or (col == size - 8 and row <= 7):
        return True
    # Bottom-left
    if (row == size - 8 and col <= 7) or (col == 7 and row >= size - 8):
        return True
    return False
