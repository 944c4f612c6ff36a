# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from typing import TYPE_CHECKING

from .elements import Rule, Terminal, WriteOnce
from .errors import GrammarError, MalformedGrammarError
from .symbols import SymbolTable

if TYPE_CHECKING:
    from typing import Iterable, List, Optional as Opt, Tuple

    from .elements import Entry

logger = logging.getLogger(__name__)


class GrammarUnit(WriteOnce):
    """All rules and terminals of one grammar source, fully resolved.

    Built once by buildGrammarUnit() and read-only afterwards, so it can be
    shared between concurrent layout calls. Two units are never compared by
    value; identifier collisions inside one unit are the integrity check.
    """

    def __init__(
        self,
        name: str,
        rules: Tuple[Rule, ...],
        terminals: Tuple[Terminal, ...],
        symbols: SymbolTable,
        documentation: str = "",
    ):
        self.name = name
        self.documentation = documentation
        self.rules = rules
        self.terminals = terminals
        self._symbols = symbols

    @property
    def imports(self) -> frozenset:
        return frozenset(self._symbols.imports)

    def entry(self, identifier: str) -> Entry:
        """Look up any entry by name, fragments included."""
        try:
            return self._symbols.resolve(identifier)
        except GrammarError as e:
            raise e.withSource(self.name)

    def entriesForDiagramming(self) -> List[Entry]:
        """Every rule, then every terminal that is not a fragment.

        Fragments stay in the symbol table so references to them resolve; they
        are only left out of the top-level diagrams.
        """
        entries: List[Entry] = list(self.rules)
        entries += [t for t in self.terminals if not t.isFragment]
        return entries

    def resolve(self) -> GrammarUnit:
        """Resolve the already-resolved entries again. Yields an equal unit."""
        return buildGrammarUnit(
            self.name,
            self.rules,
            self.terminals,
            documentation=self.documentation,
            imports=self._symbols.imports,
        )

    def __iter__(self):
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return (
            f"GrammarUnit({repr(self.name)}, rules={len(self.rules)}, "
            f"terminals={len(self.terminals)})"
        )

    def __str__(self) -> str:
        lines = [f"grammar {self.name}"]
        lines += [str(entry) for entry in self.rules]
        lines += [str(entry) for entry in self.terminals]
        return "\n".join(lines)


def buildGrammarUnit(
    name: str,
    rules: Iterable[Rule],
    terminals: Iterable[Terminal],
    documentation: Opt[str] = None,
    imports: Opt[Iterable[str]] = None,
) -> GrammarUnit:
    """Build and resolve one grammar unit.

    Any construction error aborts the whole unit and is raised with the unit's
    name attached; nothing is published half-built.
    """
    try:
        rules = tuple(rules)
        terminals = tuple(terminals)
        for entry in rules:
            if not isinstance(entry, Rule):
                raise MalformedGrammarError(f"not a rule: {entry!r}")
        for entry in terminals:
            if not isinstance(entry, Terminal):
                raise MalformedGrammarError(f"not a terminal: {entry!r}")

        symbols = SymbolTable(imports)
        for entry in rules + terminals:
            symbols.define(entry)

        resolved = SymbolTable(imports)
        resolvedRules = tuple(symbols.resolveEntry(r) for r in rules)
        resolvedTerminals = tuple(symbols.resolveEntry(t) for t in terminals)
        for entry in resolvedRules + resolvedTerminals:
            resolved.define(entry)
    except GrammarError as e:
        logger.debug("grammar %s failed to build: %s", name, e)
        raise e.withSource(name)

    logger.debug(
        "built grammar %s: %d rules, %d terminals",
        name,
        len(resolvedRules),
        len(resolvedTerminals),
    )
    return GrammarUnit(
        name, resolvedRules, resolvedTerminals, resolved, documentation or ""
    )

