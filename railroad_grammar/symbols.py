# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import TYPE_CHECKING

from .elements import (
    Alternation,
    Element,
    Entry,
    Literal,
    Quantified,
    Reference,
    Sequence,
    SymbolKind,
    Terminal,
)
from .errors import (
    DuplicateSymbolError,
    InvalidReferenceKindError,
    MalformedGrammarError,
    UnresolvedReferenceError,
)

if TYPE_CHECKING:
    from typing import Dict, Iterable, Iterator, Optional as Opt, Set


class SymbolTable:
    """Identifier -> Rule/Terminal mapping of one grammar unit.

    Filled in two phases: every entry is define()d first, and only then are
    references resolved, so forward references and mutual recursion between
    rules need no special casing. References stay identifier lookups; nothing
    here ever links one entry to another directly.
    """

    def __init__(self, imports: Opt[Iterable[str]] = None):
        self._entries: Dict[str, Entry] = {}
        self.imports: Set[str] = set(imports or ())

    def define(self, entry: Entry) -> Entry:
        if entry.identifier in self._entries:
            existing = self._entries[entry.identifier]
            raise DuplicateSymbolError(
                f"already defined as a {existing.kind.value}", entry.identifier
            )
        self._entries[entry.identifier] = entry
        return entry

    def resolve(self, identifier: str) -> Entry:
        try:
            return self._entries[identifier]
        except KeyError:
            raise UnresolvedReferenceError("undefined symbol", identifier) from None

    def kindOf(self, identifier: str) -> SymbolKind:
        if identifier in self._entries:
            return self._entries[identifier].kind
        if identifier in self.imports:
            return SymbolKind.EXTERNAL
        raise UnresolvedReferenceError("undefined symbol", identifier)

    def resolveEntry(self, entry: Entry) -> Entry:
        """Return a copy of `entry` whose references all carry their kind."""
        alternatives = [
            tuple(self._resolveElement(entry, item) for item in alt)
            for alt in entry.alternatives
        ]
        return entry.replaceAlternatives(alternatives)

    def _resolveElement(self, owner: Entry, element: Element) -> Element:
        if isinstance(element, Literal):
            return element
        elif isinstance(element, Reference):
            try:
                kind = self.kindOf(element.identifier)
            except UnresolvedReferenceError:
                raise UnresolvedReferenceError(
                    f"reference to undefined symbol {element.identifier!r}",
                    owner.identifier,
                ) from None
            if isinstance(owner, Terminal) and kind is SymbolKind.RULE:
                raise InvalidReferenceKindError(
                    f"terminal references rule {element.identifier!r}",
                    owner.identifier,
                )
            return Reference(element.identifier, kind)
        elif isinstance(element, Sequence):
            return Sequence(*(self._resolveElement(owner, item) for item in element.items))
        elif isinstance(element, Alternation):
            return Alternation(
                *(self._resolveElement(owner, item) for item in element.items)
            )
        elif isinstance(element, Quantified):
            return Quantified(self._resolveElement(owner, element.item), element.kind)
        raise MalformedGrammarError(
            f"unknown grammar element {element!r}", owner.identifier
        )

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SymbolTable({list(self._entries)!r}, imports={sorted(self.imports)!r})"
