# -*- coding: utf-8 -*-
from __future__ import annotations

import enum
import logging
import math as Math

from typing import TYPE_CHECKING

from .elements import (
    Alternation,
    Literal,
    Quantified,
    QuantifierKind,
    Reference,
    Sequence,
)
from .errors import MalformedGrammarError, UnmeasurableLabelError

if TYPE_CHECKING:
    from typing import (
        Any,
        Callable,
        Dict,
        Iterator,
        List,
        Optional as Opt,
        Sequence as Seq,
        Tuple,
    )

    from .elements import Element, Entry, SymbolKind

    MeasureF = Callable[[str], float]
    WalkerF = Callable[["LayoutBox"], Any]
    AttrsT = Dict[str, Any]

logger = logging.getLogger(__name__)

# Layout constants, in abstract layout units
DEBUG = False  # if true, writes some debug information into attributes
VS = 8  # minimum vertical separation between things
AR = 10  # radius of arcs
CHAR_WIDTH = 8.5  # width of each monospace character, used by defaultMeasure()
BOX_PADDING = 20  # horizontal room around a label inside its box
BOX_HALF_HEIGHT = 11  # a label box projects this far above and below its line
CONNECTOR_WIDTH = 20  # line between two consecutive items of a sequence
TERMINUS_WIDTH = 20  # start and end markers of a whole diagram
PADDING = 20  # blank space around a whole diagram
INTERNAL_ALIGNMENT = (
    "center"  # how to align items when they have extra space. left/right/center
)


class BoxKind(enum.Enum):
    LINE = "line"
    BRANCH = "branch"
    LOOP = "loop"
    TERMINAL_BOX = "terminal"
    RULE_BOX = "rule"


def determineGaps(outer: int, inner: int) -> Tuple[int, int]:
    diff = outer - inner
    if INTERNAL_ALIGNMENT == "left":
        return 0, diff
    elif INTERNAL_ALIGNMENT == "right":
        return diff, 0
    else:
        left = diff // 2
        return left, diff - left


def defaultMeasure(text: str) -> float:
    return len(text) * CHAR_WIDTH


def addDebug(box: LayoutBox) -> None:
    if not DEBUG:
        return
    box.attrs["data-x"] = "{0} w:{1} u:{2} d:{3}".format(
        type(box).__name__, box.width, box.up, box.down
    )


class Connector:
    """A stroke of track, as relative moves from a starting point.

    Arcs are quarter circles of radius AR; their sweep is named by the
    direction the track is heading in and the one it turns towards.
    """

    def __init__(self, x: int, y: int, role: str = "line"):
        self.x = x
        self.y = y
        self.role = role
        self.moves: List[Tuple[str, Any]] = []

    def h(self, val: int) -> Connector:
        self.moves.append(("h", val))
        return self

    def right(self, val: int) -> Connector:
        return self.h(max(0, val))

    def left(self, val: int) -> Connector:
        return self.h(-max(0, val))

    def v(self, val: int) -> Connector:
        self.moves.append(("v", val))
        return self

    def down(self, val: int) -> Connector:
        return self.v(max(0, val))

    def up(self, val: int) -> Connector:
        return self.v(-max(0, val))

    def arc(self, sweep: str) -> Connector:
        self.moves.append(("arc", sweep))
        return self

    def addTo(self, parent: LayoutBox) -> Connector:
        parent.connectors.append(self)
        return self

    @staticmethod
    def arcDelta(sweep: str) -> Tuple[int, int]:
        x = AR
        y = AR
        if sweep[0] == "e" or sweep[1] == "w":
            x *= -1
        if sweep[0] == "s" or sweep[1] == "n":
            y *= -1
        return x, y

    @property
    def end(self) -> Tuple[int, int]:
        x, y = self.x, self.y
        for move, val in self.moves:
            if move == "h":
                x += val
            elif move == "v":
                y += val
            else:
                dx, dy = self.arcDelta(val)
                x += dx
                y += dy
        return x, y

    def __repr__(self) -> str:
        return f"Connector({self.x}, {self.y}, role={repr(self.role)}, moves={self.moves})"


class LayoutBox:
    kind: BoxKind

    def __init__(self) -> None:
        # up = distance it projects above the connector line
        self.up: int = 0
        # down = distance it projects below the connector line
        self.down: int = 0
        # width = distance between the entry and exit connectors
        self.width: int = 0
        # position of the entry connector, set by format()
        self.x: Opt[int] = None
        self.y: Opt[int] = None
        self.children: List[LayoutBox] = []
        self.connectors: List[Connector] = []
        self.attrs: AttrsT = {}

    @property
    def height(self) -> int:
        return self.up + self.down

    @property
    def entry(self) -> Tuple[int, int]:
        assert self.x is not None and self.y is not None, "box is not formatted"
        return self.x, self.y

    @property
    def exit(self) -> Tuple[int, int]:
        assert self.x is not None and self.y is not None, "box is not formatted"
        return self.x + self.width, self.y

    def format(self, x: int, y: int, width: int) -> LayoutBox:
        raise NotImplementedError  # Virtual

    def walk(self, cb: WalkerF) -> None:
        cb(self)
        for child in self.children:
            child.walk(cb)

    def boxes(self) -> Iterator[LayoutBox]:
        yield self
        for child in self.children:
            yield from child.boxes()


class LabelBox(LayoutBox):
    def __init__(self, label: str, measure: MeasureF):
        LayoutBox.__init__(self)
        self.label = label
        textWidth = measure(label)
        if textWidth is None or not Math.isfinite(textWidth) or textWidth <= 0:
            raise UnmeasurableLabelError(label, textWidth)
        self.width = Math.ceil(textWidth) + BOX_PADDING
        self.up = BOX_HALF_HEIGHT
        self.down = BOX_HALF_HEIGHT
        addDebug(self)

    def format(self, x: int, y: int, width: int) -> LabelBox:
        self.connectors = []
        leftGap, rightGap = determineGaps(width, self.width)

        # Hook up the two sides if self is narrower than its stated width.
        if leftGap:
            Connector(x, y).h(leftGap).addTo(self)
        if rightGap:
            Connector(x + leftGap + self.width, y).h(rightGap).addTo(self)
        self.x = x + leftGap
        self.y = y
        return self


class TerminalBox(LabelBox):
    kind = BoxKind.TERMINAL_BOX

    def __repr__(self) -> str:
        return f"TerminalBox({repr(self.label)})"


class RuleBox(LabelBox):
    kind = BoxKind.RULE_BOX

    def __init__(self, label: str, measure: MeasureF, target: Opt[SymbolKind] = None):
        LabelBox.__init__(self, label, measure)
        # what the label names; references are never expanded
        self.target = target

    def __repr__(self) -> str:
        return f"RuleBox({repr(self.label)})"


class Line(LayoutBox):
    """Items side by side on one connector line.

    An empty line is a bare connector; as a Branch item it is a bypass.
    """

    kind = BoxKind.LINE

    def __init__(self, items: Seq[LayoutBox], role: str = "line"):
        LayoutBox.__init__(self)
        self.children = list(items)
        self.role = role
        if self.children:
            self.width = sum(item.width for item in self.children)
            self.width += CONNECTOR_WIDTH * (len(self.children) - 1)
            self.up = max(item.up for item in self.children)
            self.down = max(item.down for item in self.children)
        addDebug(self)

    def __repr__(self) -> str:
        items = ", ".join(repr(item) for item in self.children)
        return f"Line({items})"

    def format(self, x: int, y: int, width: int) -> Line:
        self.connectors = []
        self.y = y
        if not self.children:
            self.x = x
            if width:
                Connector(x, y, self.role).right(width).addTo(self)
            return self

        leftGap, rightGap = determineGaps(width, self.width)
        if leftGap:
            Connector(x, y, self.role).h(leftGap).addTo(self)
        if rightGap:
            Connector(x + leftGap + self.width, y, self.role).h(rightGap).addTo(self)
        x += leftGap
        self.x = x
        for i, item in enumerate(self.children):
            if i > 0:
                Connector(x, y, self.role).h(CONNECTOR_WIDTH).addTo(self)
                x += CONNECTOR_WIDTH
            item.format(x, y, item.width)
            x += item.width
        return self


class Branch(LayoutBox):
    """Items stacked vertically, the default one on the main line.

    offsets[i] is the vertical distance from the main line to the connector
    line of items[i], negative above it.
    """

    kind = BoxKind.BRANCH

    def __init__(self, default: int, *items: LayoutBox):
        LayoutBox.__init__(self)
        assert 0 <= default < len(items)
        self.default = default
        self.children = list(items)
        self.width = AR * 4 + max(item.width for item in self.children)

        # The size of the vertical separation between an item
        # and the following one, bumped up when the arcs would not fit.
        self.separators: List[int] = [VS] * (len(items) - 1)
        self.offsets: List[int] = [0] * len(items)

        for i in range(default - 1, -1, -1):
            arcs = AR * 2 if i == default - 1 else AR
            item = self.children[i]
            lowerItem = self.children[i + 1]
            delta = lowerItem.up + VS + item.down
            self.separators[i] = VS + max(0, arcs - delta)
            self.offsets[i] = self.offsets[i + 1] - (
                lowerItem.up + self.separators[i] + item.down
            )

        for i in range(default + 1, len(self.children)):
            arcs = AR * 2 if i == default + 1 else AR
            item = self.children[i]
            upperItem = self.children[i - 1]
            delta = upperItem.down + VS + item.up
            self.separators[i - 1] = VS + max(0, arcs - delta)
            self.offsets[i] = self.offsets[i - 1] + (
                upperItem.down + self.separators[i - 1] + item.up
            )

        self.up = self.children[0].up - self.offsets[0]
        self.down = self.offsets[-1] + self.children[-1].down
        addDebug(self)

    @property
    def top(self) -> int:
        """Offset of the highest branch: where the flow fans out to."""
        return self.offsets[0]

    @property
    def bottom(self) -> int:
        """Offset of the lowest branch: where the flow fans back in from."""
        return self.offsets[-1]

    @property
    def hasBypass(self) -> bool:
        return any(
            isinstance(item, Line) and not item.children for item in self.children
        )

    def __repr__(self) -> str:
        items = ", ".join(repr(item) for item in self.children)
        return f"Branch({self.default}, {items})"

    def format(self, x: int, y: int, width: int) -> Branch:
        self.connectors = []
        leftGap, rightGap = determineGaps(width, self.width)

        # Hook up the two sides if self is narrower than its stated width.
        if leftGap:
            Connector(x, y).h(leftGap).addTo(self)
        if rightGap:
            Connector(x + leftGap + self.width, y).h(rightGap).addTo(self)
        x += leftGap
        self.x = x
        self.y = y

        innerWidth = self.width - AR * 4
        for i, item in enumerate(self.children):
            role = getattr(item, "role", "branch")
            if role == "line":
                role = "branch"
            distanceFromY = self.offsets[i]
            if distanceFromY < 0:
                # Do the elements that curve above
                distanceFromY = -distanceFromY
                Connector(x, y, role).arc("se").up(distanceFromY - AR * 2).arc(
                    "wn"
                ).addTo(self)
                item.format(x + AR * 2, y - distanceFromY, innerWidth)
                Connector(x + AR * 2 + innerWidth, y - distanceFromY, role).arc(
                    "ne"
                ).down(distanceFromY - AR * 2).arc("ws").addTo(self)
            elif distanceFromY == 0:
                # Do the straight-line path.
                Connector(x, y).right(AR * 2).addTo(self)
                item.format(x + AR * 2, y, innerWidth)
                Connector(x + AR * 2 + innerWidth, y).right(AR * 2).addTo(self)
            else:
                # Do the elements that curve below
                Connector(x, y, role).arc("ne").down(distanceFromY - AR * 2).arc(
                    "ws"
                ).addTo(self)
                item.format(x + AR * 2, y + distanceFromY, innerWidth)
                Connector(x + AR * 2 + innerWidth, y + distanceFromY, role).arc(
                    "se"
                ).up(distanceFromY - AR * 2).arc("wn").addTo(self)
        return self


class Loop(LayoutBox):
    """An item with a backward track below it, from its exit to its entry."""

    kind = BoxKind.LOOP

    def __init__(self, item: LayoutBox):
        LayoutBox.__init__(self)
        self.item = item
        self.children = [item]
        self.width = item.width + AR * 2
        self.up = item.up
        self.loopOffset = max(AR * 2, item.down + VS)
        self.down = self.loopOffset
        addDebug(self)

    def __repr__(self) -> str:
        return f"Loop({repr(self.item)})"

    def format(self, x: int, y: int, width: int) -> Loop:
        self.connectors = []
        leftGap, rightGap = determineGaps(width, self.width)

        # Hook up the two sides if self is narrower than its stated width.
        if leftGap:
            Connector(x, y).h(leftGap).addTo(self)
        if rightGap:
            Connector(x + leftGap + self.width, y).h(rightGap).addTo(self)
        x += leftGap
        self.x = x
        self.y = y

        # Draw item
        Connector(x, y).right(AR).addTo(self)
        self.item.format(x + AR, y, self.width - AR * 2)
        Connector(x + self.width - AR, y).right(AR).addTo(self)

        # Draw repeat arc, leaving from the item's exit
        (
            Connector(x + self.width - AR, y, "loop")
            .arc("ne")
            .down(self.loopOffset - AR * 2)
            .arc("es")
            .left(self.width - AR * 2)
            .arc("sw")
            .up(self.loopOffset - AR * 2)
            .arc("wn")
            .addTo(self)
        )
        return self


class LayoutGeometry:
    """The laid out diagram of one rule or terminal.

    Wraps the root box with a start and an end marker and some padding;
    start and end are the points where those markers meet the track.
    """

    def __init__(self, entry: Entry, root: LayoutBox, padding: int = PADDING):
        self.identifier = entry.identifier
        self.documentation = entry.documentation
        self.isFragment = entry.isFragment
        self.root = root
        self.padding = padding
        self.up = max(root.up, TERMINUS_WIDTH // 2)
        self.down = max(root.down, TERMINUS_WIDTH // 2)
        self.width = root.width + TERMINUS_WIDTH * 2 + padding * 2
        self.height = self.up + self.down + padding * 2
        self.start: Opt[Tuple[int, int]] = None
        self.end: Opt[Tuple[int, int]] = None
        self.connectors: List[Connector] = []
        self.formatted = False

    def format(self) -> LayoutGeometry:
        if self.formatted:
            return self
        x = self.padding
        y = self.padding + self.up
        self.start = (x, y)
        self.connectors.append(Connector(x, y).right(TERMINUS_WIDTH))
        x += TERMINUS_WIDTH
        self.root.format(x, y, self.root.width)
        x += self.root.width
        self.connectors.append(Connector(x, y).right(TERMINUS_WIDTH))
        self.end = (x + TERMINUS_WIDTH, y)
        self.formatted = True
        return self

    def boxes(self) -> Iterator[LayoutBox]:
        return self.root.boxes()

    def allConnectors(self) -> Iterator[Connector]:
        yield from self.connectors
        for box in self.boxes():
            yield from box.connectors

    def __repr__(self) -> str:
        return f"LayoutGeometry({repr(self.identifier)}, {repr(self.root)})"


def layout(entry: Entry, measureLabel: Opt[MeasureF] = None) -> LayoutGeometry:
    """Lay out the alternatives of one rule or terminal.

    measureLabel gives the text width of a label in the target format.
    Raises UnmeasurableLabelError, naming the entry, if it returns a
    non-positive width.
    """
    measure = measureLabel or defaultMeasure
    try:
        root = layoutAlternatives(entry.alternatives, measure)
    except UnmeasurableLabelError as e:
        if e.identifier is None:
            e.identifier = entry.identifier
        raise
    geometry = LayoutGeometry(entry, root).format()
    logger.debug(
        "laid out %s: %dx%d", entry.identifier, geometry.width, geometry.height
    )
    return geometry


def layoutAlternatives(
    alternatives: Seq[Seq[Element]], measure: MeasureF
) -> LayoutBox:
    lines = [Line([layoutElement(item, measure) for item in alt]) for alt in alternatives]
    if not lines:
        return Line([])
    if len(lines) == 1:
        return lines[0]
    return Branch(0, *lines)


def layoutElement(element: Element, measure: MeasureF) -> LayoutBox:
    if isinstance(element, Literal):
        return TerminalBox(element.text, measure)
    elif isinstance(element, Reference):
        return RuleBox(element.identifier, measure, element.kind)
    elif isinstance(element, Sequence):
        return Line([layoutElement(item, measure) for item in element.items])
    elif isinstance(element, Alternation):
        return Branch(0, *(layoutElement(item, measure) for item in element.items))
    elif isinstance(element, Quantified):
        inner = layoutElement(element.item, measure)
        if element.kind is QuantifierKind.OPTIONAL:
            return Branch(1, Line([], role="bypass"), inner)
        elif element.kind is QuantifierKind.PLUS:
            return Loop(inner)
        elif element.kind is QuantifierKind.STAR:
            return Branch(1, Line([], role="bypass"), Loop(inner))
        raise MalformedGrammarError(f"unknown quantifier {element.kind!r}")
    raise MalformedGrammarError(f"unknown grammar element {element!r}")
