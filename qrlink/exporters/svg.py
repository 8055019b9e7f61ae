# -*- coding: utf-8 -*-
"""
SVG export helpers: downloadable bytes, data URIs and a light optimize pass.
"""

import base64
import re
from urllib.parse import quote

_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
_WHITESPACE_RE = re.compile(r'\s+')
_INTER_TAG_RE = re.compile(r'>\s+<')

SVG_MIMETYPE = 'image/svg+xml'


def svg_to_bytes(svg: str) -> bytes:
    """UTF-8 bytes ready to be served as an image/svg+xml download."""
    return svg.encode('utf-8')


def svg_to_data_url(svg: str) -> str:
    return f"data:{SVG_MIMETYPE},{quote(svg, safe='')}"


def svg_to_base64_data_url(svg: str) -> str:
    b64 = base64.b64encode(svg.encode('utf-8')).decode('ascii')
    return f"data:{SVG_MIMETYPE};base64,{b64}"


def optimize_svg(svg: str) -> str:
    """
    Strip comments and collapse whitespace.

    Idempotent: optimize_svg(optimize_svg(x)) == optimize_svg(x).
    """
    while True:
        # removing one comment can splice the halves of another into place
        cleaned = _COMMENT_RE.sub('', svg)
        cleaned = _WHITESPACE_RE.sub(' ', cleaned)
        cleaned = _INTER_TAG_RE.sub('><', cleaned).strip()
        if cleaned == svg:
            return cleaned
        svg = cleaned
