# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Optional as Opt


class GrammarError(Exception):
    """Base class of everything the grammar model and layout engine raise.

    Carries the offending identifier and the name of the grammar unit it
    belongs to, so batch callers can report failures per file.
    """

    def __init__(
        self, message: str, identifier: Opt[str] = None, source: Opt[str] = None
    ):
        Exception.__init__(self, message)
        self.message = message
        self.identifier = identifier
        self.source = source

    def withSource(self, source: str) -> GrammarError:
        if self.source is None:
            self.source = source
        return self

    def __str__(self) -> str:
        where = []
        if self.source is not None:
            where.append(self.source)
        if self.identifier is not None:
            where.append(self.identifier)
        if where:
            return f"{':'.join(where)}: {self.message}"
        return self.message


class MalformedGrammarError(GrammarError):
    pass


class DuplicateSymbolError(GrammarError):
    pass


class UnresolvedReferenceError(GrammarError):
    pass


class InvalidReferenceKindError(GrammarError):
    pass


class UnmeasurableLabelError(GrammarError):
    def __init__(
        self,
        label: str,
        width: float,
        identifier: Opt[str] = None,
        source: Opt[str] = None,
    ):
        GrammarError.__init__(
            self,
            f"label {label!r} measured to non-positive width {width!r}",
            identifier,
            source,
        )
        self.label = label
        self.width = width


class UnknownFormatError(GrammarError):
    pass
