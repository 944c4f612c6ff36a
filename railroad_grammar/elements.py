# -*- coding: utf-8 -*-
from __future__ import annotations

import enum

from typing import TYPE_CHECKING

from .errors import MalformedGrammarError

if TYPE_CHECKING:
    from typing import Iterable, Optional as Opt, Tuple, Union

    Node = Union[str, "Element"]


class SymbolKind(enum.Enum):
    RULE = "rule"
    TERMINAL = "terminal"
    # imported from another grammar unit, resolved by the caller
    EXTERNAL = "external"


class QuantifierKind(enum.Enum):
    OPTIONAL = "?"
    STAR = "*"
    PLUS = "+"


class WriteOnce:
    """Attributes may be set once, in __init__, and never rebound."""

    def __setattr__(self, name: str, value: object) -> None:
        if name in self.__dict__:
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)


class Element(WriteOnce):
    """Base of the closed set of grammar element variants.

    Elements are immutable and compare structurally, so two trees built from
    the same tokens are equal regardless of where they came from.
    """

    isLeaf = False

    @property
    def children(self) -> Tuple[Element, ...]:
        return ()

    def _key(self) -> tuple:
        raise NotImplementedError  # Virtual

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))


class Literal(Element):
    isLeaf = True

    def __init__(self, text: str):
        self.text = text

    def _key(self) -> tuple:
        return (self.text,)

    def __repr__(self) -> str:
        return f"Literal({repr(self.text)})"

    def __str__(self) -> str:
        return f"'{self.text}'"


class Reference(Element):
    isLeaf = True

    def __init__(self, identifier: str, kind: Opt[SymbolKind] = None):
        self.identifier = identifier
        self.kind = kind

    @property
    def resolved(self) -> bool:
        return self.kind is not None

    def _key(self) -> tuple:
        return (self.identifier, self.kind)

    def __repr__(self) -> str:
        if self.kind is None:
            return f"Reference({repr(self.identifier)})"
        return f"Reference({repr(self.identifier)}, {self.kind})"

    def __str__(self) -> str:
        return self.identifier


class Sequence(Element):
    def __init__(self, *items: Node):
        if not items:
            raise MalformedGrammarError("a sequence needs at least one element")
        self.items: Tuple[Element, ...] = tuple(wrapString(item) for item in items)

    @property
    def children(self) -> Tuple[Element, ...]:
        return self.items

    def _key(self) -> tuple:
        return self.items

    def __repr__(self) -> str:
        items = ", ".join(repr(item) for item in self.items)
        return f"Sequence({items})"

    def __str__(self) -> str:
        return " ".join(str(item) for item in self.items)


class Alternation(Element):
    def __init__(self, *items: Node):
        if not items:
            raise MalformedGrammarError("an alternation needs at least one branch")
        self.items: Tuple[Sequence, ...] = tuple(
            item if isinstance(item, Sequence) else Sequence(item) for item in items
        )

    @property
    def children(self) -> Tuple[Element, ...]:
        return self.items

    def _key(self) -> tuple:
        return self.items

    def __repr__(self) -> str:
        items = ", ".join(repr(item) for item in self.items)
        return f"Alternation({items})"

    def __str__(self) -> str:
        return "(" + " | ".join(str(item) for item in self.items) + ")"


class Quantified(Element):
    def __init__(self, item: Node, kind: QuantifierKind):
        item = wrapString(item)
        # x** is x*, x++ is x+, x?? is x?
        if isinstance(item, Quantified) and item.kind is kind:
            item = item.item
        self.item = item
        self.kind = kind

    @property
    def children(self) -> Tuple[Element, ...]:
        return (self.item,)

    def _key(self) -> tuple:
        return (self.item, self.kind)

    def __repr__(self) -> str:
        return f"Quantified({repr(self.item)}, {self.kind})"

    def __str__(self) -> str:
        if self.item.isLeaf or isinstance(self.item, Alternation):
            return f"{self.item}{self.kind.value}"
        return f"({self.item}){self.kind.value}"


def wrapString(value: Node) -> Element:
    if isinstance(value, Element):
        return value
    if isinstance(value, str):
        return Literal(value)
    raise MalformedGrammarError(f"not a grammar element: {value!r}")


def Optional(item: Node) -> Quantified:
    return Quantified(item, QuantifierKind.OPTIONAL)


def ZeroOrMore(item: Node) -> Quantified:
    return Quantified(item, QuantifierKind.STAR)


def OneOrMore(item: Node) -> Quantified:
    return Quantified(item, QuantifierKind.PLUS)


def alternative(items: Iterable[Node]) -> Tuple[Element, ...]:
    """Normalize one alternative of a rule or terminal. Empty is epsilon."""
    return tuple(wrapString(item) for item in items)


def walk(element: Element) -> Iterable[Element]:
    yield element
    for child in element.children:
        yield from walk(child)


class Entry(WriteOnce):
    """A named production of a grammar unit: a Rule or a Terminal.

    Equality is by identifier, since identifiers are unique within a unit.
    """

    kind: SymbolKind
    isFragment = False

    def __init__(
        self,
        identifier: str,
        alternatives: Opt[Iterable[Iterable[Node]]] = None,
        documentation: Opt[str] = None,
    ):
        if not identifier:
            raise MalformedGrammarError("an entry needs an identifier")
        self.identifier = identifier
        self.documentation = documentation or ""
        # no alternatives at all is the same as a single epsilon alternative
        try:
            self.alternatives: Tuple[Tuple[Element, ...], ...] = tuple(
                alternative(alt) for alt in (alternatives or [()])
            )
        except MalformedGrammarError as e:
            if e.identifier is None:
                e.identifier = identifier
            raise

    def references(self) -> Iterable[Reference]:
        for alt in self.alternatives:
            for item in alt:
                for element in walk(item):
                    if isinstance(element, Reference):
                        yield element

    def replaceAlternatives(
        self, alternatives: Iterable[Iterable[Element]]
    ) -> Entry:
        raise NotImplementedError  # Virtual

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return type(self) is type(other) and self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash(self.identifier)

    def __str__(self) -> str:
        alts = " | ".join(" ".join(str(item) for item in alt) for alt in self.alternatives)
        doc = f"   // {self.documentation}" if self.documentation else ""
        fragment = " (fragment)" if self.isFragment else ""
        return f"{self.identifier}{fragment} -> {alts}{doc}"


class Rule(Entry):
    kind = SymbolKind.RULE

    def replaceAlternatives(self, alternatives: Iterable[Iterable[Element]]) -> Rule:
        return Rule(self.identifier, alternatives, self.documentation)

    def __repr__(self) -> str:
        return f"Rule({repr(self.identifier)}, {list(self.alternatives)!r})"


class Terminal(Entry):
    kind = SymbolKind.TERMINAL

    def __init__(
        self,
        identifier: str,
        alternatives: Opt[Iterable[Iterable[Node]]] = None,
        documentation: Opt[str] = None,
        isFragment: bool = False,
    ):
        Entry.__init__(self, identifier, alternatives, documentation)
        self.isFragment = isFragment
        for alt in self.alternatives:
            for item in alt:
                if not item.isLeaf:
                    raise MalformedGrammarError(
                        f"terminals may only hold literals and references, not {item!r}",
                        identifier,
                    )

    def replaceAlternatives(
        self, alternatives: Iterable[Iterable[Element]]
    ) -> Terminal:
        return Terminal(
            self.identifier, alternatives, self.documentation, self.isFragment
        )

    def __repr__(self) -> str:
        return (
            f"Terminal({repr(self.identifier)}, {list(self.alternatives)!r}, "
            f"isFragment={self.isFragment!r})"
        )
