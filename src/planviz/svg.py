"""Small helpers for building SVG and HTML element trees."""

from __future__ import annotations

from collections.abc import Mapping
from xml.etree import ElementTree as ET

SVG_NS = "http://www.w3.org/2000/svg"

AttrValue = str | int | float


def fmt_num(value: float) -> str:
    """Format a coordinate compactly: 40.0 -> "40", 12.345 -> "12.35"."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}".rstrip("0").rstrip(".")


def _attrs(attrs: Mapping[str, AttrValue] | None) -> dict[str, str]:
    if not attrs:
        return {}
    return {
        key: value if isinstance(value, str) else fmt_num(value) for key, value in attrs.items()
    }


def el(
    tag: str,
    attrs: Mapping[str, AttrValue] | None = None,
    *,
    parent: ET.Element | None = None,
    text: str | None = None,
) -> ET.Element:
    """Create an element, optionally appending it to ``parent``."""
    element = ET.Element(tag, _attrs(attrs)) if parent is None else ET.SubElement(
        parent, tag, _attrs(attrs)
    )
    if text is not None:
        element.text = text
    return element


def svg_root(width: float, height: float, **attrs: AttrValue) -> ET.Element:
    """Create an ``<svg>`` root with explicit pixel size."""
    return el("svg", {"xmlns": SVG_NS, "width": width, "height": height, **attrs})


def to_markup(element: ET.Element) -> str:
    """Serialize an element tree as HTML-compatible markup."""
    return ET.tostring(element, encoding="unicode", method="html")
