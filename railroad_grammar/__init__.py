# -*- coding: utf-8 -*-
"""Railroad syntax diagrams for grammars of rules and lexical terminals."""

from .elements import (
    Alternation,
    Element,
    Entry,
    Literal,
    OneOrMore,
    Optional,
    Quantified,
    QuantifierKind,
    Reference,
    Rule,
    Sequence,
    SymbolKind,
    Terminal,
    ZeroOrMore,
)
from .errors import (
    DuplicateSymbolError,
    GrammarError,
    InvalidReferenceKindError,
    MalformedGrammarError,
    UnknownFormatError,
    UnmeasurableLabelError,
    UnresolvedReferenceError,
)
from .batch import GenerationFailure, GenerationReport, buildUnits, generate
from .engine import BoxKind, LayoutGeometry, defaultMeasure, layout
from .output import FORMATS, render, renderHtml, renderSvg
from .symbols import SymbolTable
from .unit import GrammarUnit, buildGrammarUnit
