"""Shared grammar fixtures for the railroad_grammar tests."""

import pytest

from railroad_grammar import (
    Alternation,
    OneOrMore,
    Optional,
    Reference,
    Rule,
    Sequence,
    Terminal,
    ZeroOrMore,
    buildGrammarUnit,
)


def tenPerChar(text):
    """Label metrics that keep the expected sizes easy to compute."""
    return len(text) * 10


@pytest.fixture
def measure():
    return tenPerChar


@pytest.fixture
def loopUnit():
    """start -> 'a' loop ; loop -> ('b')*"""
    return buildGrammarUnit(
        "Loop",
        rules=[
            Rule("start", [["a", Reference("loop")]]),
            Rule("loop", [[ZeroOrMore("b")]]),
        ],
        terminals=[],
    )


@pytest.fixture
def exprUnit():
    """A small expression grammar with recursion and a fragment terminal."""
    return buildGrammarUnit(
        "Expr",
        rules=[
            Rule(
                "expr",
                [[Reference("term"), ZeroOrMore(Sequence(Alternation("+", "-"), Reference("term")))]],
                documentation="an arithmetic expression",
            ),
            Rule(
                "term",
                [
                    [Reference("NUMBER")],
                    ["(", Reference("expr"), ")"],
                ],
            ),
            Rule("args", [[Optional(Sequence(Reference("expr"), ZeroOrMore(Sequence(",", Reference("expr")))))]]),
            Rule("digits", [[OneOrMore(Reference("NUMBER"))]]),
        ],
        terminals=[
            Terminal("NUMBER", [[Reference("DIGIT")], [Reference("DIGIT"), Reference("NUMBER")]]),
            Terminal("DIGIT", [["0"], ["1"], ["2"]], "a single digit", isFragment=True),
        ],
    )
