# -*- coding: utf-8 -*-
"""
SVG Document Model

Typed drawing primitives collected into a document and serialized once.
Geometry can be inspected in tests without parsing SVG text, and paint order
is simply list order.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union
from xml.sax.saxutils import quoteattr

SVG_NS = 'http://www.w3.org/2000/svg'
XLINK_NS = 'http://www.w3.org/1999/xlink'
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def fmt(value: float) -> str:
    """Format a coordinate without float noise or trailing zeros."""
    if isinstance(value, int):
        return str(value)
    text = f"{value:.4f}".rstrip('0').rstrip('.')
    return '0' if text in ('', '-0') else text


def _attrs(pairs) -> str:
    return ''.join(f' {name}={quoteattr(str(val))}' for name, val in pairs if val is not None)


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    rx: Optional[float] = None

    def to_svg(self) -> str:
        rx = fmt(self.rx) if self.rx else None
        return '<rect' + _attrs([
            ('x', fmt(self.x)), ('y', fmt(self.y)),
            ('width', fmt(self.width)), ('height', fmt(self.height)),
            ('rx', rx), ('fill', self.fill),
        ]) + '/>'


@dataclass
class Circle:
    cx: float
    cy: float
    r: float
    fill: Optional[str] = None

    def to_svg(self) -> str:
        return '<circle' + _attrs([
            ('cx', fmt(self.cx)), ('cy', fmt(self.cy)), ('r', fmt(self.r)), ('fill', self.fill),
        ]) + '/>'


@dataclass
class Path:
    d: str
    fill: Optional[str] = None

    def to_svg(self) -> str:
        return '<path' + _attrs([('fill', self.fill), ('d', self.d)]) + '/>'


@dataclass
class Image:
    href: str
    x: float
    y: float
    width: float
    height: float

    def to_svg(self) -> str:
        return '<image' + _attrs([
            ('xlink:href', self.href), ('x', fmt(self.x)), ('y', fmt(self.y)),
            ('width', fmt(self.width)), ('height', fmt(self.height)),
            ('preserveAspectRatio', 'xMidYMid meet'),
        ]) + '/>'


@dataclass
class Group:
    children: List['Element'] = field(default_factory=list)
    fill: Optional[str] = None

    def to_svg(self) -> str:
        inner = ''.join(child.to_svg() for child in self.children)
        return '<g' + _attrs([('fill', self.fill)]) + '>' + inner + '</g>'


Element = Union[Rect, Circle, Path, Image, Group]


@dataclass
class SVGDocument:
    """A square SVG canvas in module units."""

    view_box: float
    elements: List[Element] = field(default_factory=list)
    crisp_edges: bool = True

    def add(self, element: Element) -> Element:
        self.elements.append(element)
        return element

    def extend(self, elements) -> None:
        self.elements.extend(elements)

    def to_svg(self, include_xml_declaration: bool = True) -> str:
        side = fmt(self.view_box)
        root = '<svg' + _attrs([
            ('xmlns', SVG_NS),
            ('xmlns:xlink', XLINK_NS if any(isinstance(e, Image) for e in self.elements) else None),
            ('viewBox', f'0 0 {side} {side}'),
            ('shape-rendering', 'crispEdges' if self.crisp_edges else None),
        ]) + '>'
        out = []
        if include_xml_declaration:
            out.append(XML_DECLARATION)
        out.append(root)
        out.extend(f'  {element.to_svg()}' for element in self.elements)
        out.append('</svg>')
        return '\n'.join(out)
