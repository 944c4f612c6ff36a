# -*- coding: utf-8 -*-
from __future__ import annotations

import io

from typing import TYPE_CHECKING

from . import engine as Engine
from .elements import SymbolKind
from .errors import UnknownFormatError
from .engine import BoxKind

if TYPE_CHECKING:
    from typing import Any, Callable, Dict, Iterable, List, Optional as Opt, Union

    from .engine import Connector, LayoutBox, LayoutGeometry, MeasureF

    WriterF = Callable[[str], Any]
    AttrsT = Dict[str, Any]

# Display constants
DIAGRAM_CLASS = "railroad-diagram"  # class to put on the root <svg>
STROKE_ODD_PIXEL_LENGTH = (
    True  # is the stroke width an odd (1px, 3px, etc) pixel length?
)
TEXT_BASELINE = 4  # label text sits this far below the connector line

DEFAULT_STYLE = """\
	svg.railroad-diagram {
		background-color:hsl(30,20%,95%);
	}
	svg.railroad-diagram path {
		stroke-width:3;
		stroke:black;
		fill:rgba(0,0,0,0);
	}
	svg.railroad-diagram text {
		font:bold 14px monospace;
		text-anchor:middle;
	}
	svg.railroad-diagram rect{
		stroke-width:3;
		stroke:black;
		fill:hsl(120,100%,90%);
	}
	svg.railroad-diagram g.non-terminal rect {
		fill:hsl(120,100%,95%);
	}
"""


def escapeAttr(val: Union[str, float]) -> str:
    if isinstance(val, str):
        return val.replace("&", "&amp;").replace("'", "&apos;").replace('"', "&quot;")
    return f"{val:g}"


def escapeHtml(val: str) -> str:
    return escapeAttr(val).replace("<", "&lt;")


class SvgElement:
    def __init__(self, name: str, attrs: Opt[AttrsT] = None, text: Opt[str] = None):
        self.name = name
        self.attrs: AttrsT = attrs or {}
        self.children: List[Union[str, SvgElement]] = [text] if text else []

    def addTo(self, parent: SvgElement) -> SvgElement:
        parent.children.append(self)
        return self

    def writeSvg(self, write: WriterF) -> None:
        write("<{0}".format(self.name))
        for name, value in sorted(self.attrs.items()):
            write(' {0}="{1}"'.format(name, escapeAttr(value)))
        write(">")
        if self.name in ["g", "svg"]:
            write("\n")
        for child in self.children:
            if isinstance(child, (SvgElement, Style)):
                child.writeSvg(write)
            else:
                write(escapeHtml(child))
        write("</{0}>".format(self.name))

    def __repr__(self) -> str:
        return f"SvgElement({self.name}, {self.attrs}, {self.children})"


class Style:
    def __init__(self, css: str):
        self.css = css

    def addTo(self, parent: SvgElement) -> Style:
        parent.children.append(self)  # type: ignore[arg-type]
        return self

    def writeSvg(self, write: WriterF) -> None:
        # Write included stylesheet as CDATA. See https://developer.mozilla.org/en-US/docs/Web/SVG/Element/style
        cdata = "/* <![CDATA[ */\n{css}\n/* ]]> */\n".format(css=self.css)
        write("<style>{cdata}</style>".format(cdata=cdata))


def pathData(connector: Connector) -> str:
    d = f"M{connector.x} {connector.y}"
    for move, val in connector.moves:
        if move == "arc":
            x, y = connector.arcDelta(val)
            cw = 1 if val in ("ne", "es", "sw", "wn") else 0
            d += f"a{Engine.AR} {Engine.AR} 0 0 {cw} {x} {y}"
        else:
            d += f"{move}{val}"
    # Pad the end so line caps join up.
    return d + "h.5" if connector.moves and connector.moves[-1][0] == "h" else d


def connectorElement(connector: Connector) -> SvgElement:
    attrs: AttrsT = {"d": pathData(connector)}
    if connector.role != "line":
        attrs["class"] = connector.role
    return SvgElement("path", attrs)


def boxElement(box: LayoutBox) -> SvgElement:
    g = SvgElement("g", dict(box.attrs))
    if box.kind is BoxKind.TERMINAL_BOX or box.kind is BoxKind.RULE_BOX:
        assert box.x is not None and box.y is not None
        g.attrs["class"] = (
            "terminal" if box.kind is BoxKind.TERMINAL_BOX else "non-terminal"
        )
        rect: AttrsT = {
            "x": box.x,
            "y": box.y - box.up,
            "width": box.width,
            "height": box.height,
        }
        if box.kind is BoxKind.TERMINAL_BOX:
            rect["rx"] = 10
            rect["ry"] = 10
        SvgElement("rect", rect).addTo(g)
        text = SvgElement(
            "text",
            {"x": box.x + box.width / 2, "y": box.y + TEXT_BASELINE},
            box.label,  # type: ignore[attr-defined]
        )
        target = getattr(box, "target", None)
        if box.kind is BoxKind.RULE_BOX and target in (
            SymbolKind.RULE,
            SymbolKind.TERMINAL,
        ):
            a = SvgElement("a", {"xlink:href": f"#{box.label}"}).addTo(g)  # type: ignore[attr-defined]
            text.addTo(a)
        else:
            text.addTo(g)
    else:
        g.attrs["class"] = box.kind.value
    for connector in box.connectors:
        connectorElement(connector).addTo(g)
    for child in box.children:
        boxElement(child).addTo(g)
    return g


def svgElement(geometry: LayoutGeometry) -> SvgElement:
    if not geometry.formatted:
        geometry.format()
    assert geometry.start is not None and geometry.end is not None
    svg = SvgElement(
        "svg",
        {
            "class": DIAGRAM_CLASS,
            "width": geometry.width,
            "height": geometry.height,
            "viewBox": f"0 0 {geometry.width} {geometry.height}",
        },
    )
    g = SvgElement("g")
    if STROKE_ODD_PIXEL_LENGTH:
        g.attrs["transform"] = "translate(.5 .5)"
    x, y = geometry.start
    SvgElement("path", {"d": f"M {x} {y - 10} v 20 m 10 -20 v 20"}).addTo(g)
    for connector in geometry.connectors:
        connectorElement(connector).addTo(g)
    boxElement(geometry.root).addTo(g)
    x, y = geometry.end
    SvgElement("path", {"d": f"M {x - 10} {y - 10} v 20 m 10 -20 v 20"}).addTo(g)
    g.addTo(svg)
    return svg


def writeSvg(geometry: LayoutGeometry, write: WriterF) -> None:
    svgElement(geometry).writeSvg(write)


def writeStandalone(
    geometry: LayoutGeometry, write: WriterF, css: Opt[str] = None
) -> None:
    if css is None:
        css = DEFAULT_STYLE
    svg = svgElement(geometry)
    Style(css).addTo(svg)
    svg.attrs["xmlns"] = "http://www.w3.org/2000/svg"
    svg.attrs["xmlns:xlink"] = "http://www.w3.org/1999/xlink"
    svg.writeSvg(write)


def renderSvg(geometry: LayoutGeometry) -> str:
    out = io.StringIO()
    writeStandalone(geometry, out.write)
    return out.getvalue()


def renderHtml(title: str, geometries: Iterable[LayoutGeometry]) -> str:
    out = io.StringIO()
    write = out.write
    write(f"<!doctype html><title>{escapeHtml(title)}</title>")
    write(f"\n<style>\n{DEFAULT_STYLE}</style>\n<body>")
    for geometry in geometries:
        name = escapeHtml(geometry.identifier)
        write(f"\n<h1 id=\"{escapeAttr(geometry.identifier)}\">{name}</h1>\n")
        if geometry.documentation:
            write(f"<p>{escapeHtml(geometry.documentation)}</p>\n")
        writeSvg(geometry, write)
        write("\n")
    return out.getvalue()


# Every output format, with the text metrics its labels are laid out with.
FORMATS: Dict[str, MeasureF] = {
    "svg": Engine.defaultMeasure,
    "html": Engine.defaultMeasure,
}


def measureFor(fmt: str) -> MeasureF:
    try:
        return FORMATS[fmt.strip().lower()]
    except KeyError:
        raise UnknownFormatError(
            f"unknown format {fmt!r}, expected one of {', '.join(FORMATS)}"
        ) from None


def render(geometry: LayoutGeometry, fmt: str) -> str:
    fmt = fmt.strip().lower()
    if fmt == "svg":
        return renderSvg(geometry)
    elif fmt == "html":
        return renderHtml(geometry.identifier, [geometry])
    raise UnknownFormatError(
        f"unknown format {fmt!r}, expected one of {', '.join(FORMATS)}",
        geometry.identifier,
    )
