"""Tests for symbol resolution and grammar unit construction."""

import pytest

from railroad_grammar import (
    DuplicateSymbolError,
    InvalidReferenceKindError,
    MalformedGrammarError,
    Reference,
    Rule,
    Sequence,
    SymbolKind,
    SymbolTable,
    Terminal,
    UnresolvedReferenceError,
    ZeroOrMore,
    buildGrammarUnit,
)
from railroad_grammar.elements import walk


def references(entry):
    return [
        element
        for alt in entry.alternatives
        for item in alt
        for element in walk(item)
        if isinstance(element, Reference)
    ]


def test_loop_example_builds(loopUnit):
    assert [r.identifier for r in loopUnit.rules] == ["start", "loop"]
    start = loopUnit.entry("start")
    assert references(start) == [Reference("loop", SymbolKind.RULE)]


def test_forward_and_mutual_references_resolve():
    unit = buildGrammarUnit(
        "Mutual",
        rules=[
            Rule("a", [["x", Reference("b")]]),
            Rule("b", [["y", Reference("a")], []]),
        ],
        terminals=[],
    )
    assert references(unit.entry("a")) == [Reference("b", SymbolKind.RULE)]
    assert references(unit.entry("b")) == [Reference("a", SymbolKind.RULE)]


def test_self_recursive_rule_builds():
    unit = buildGrammarUnit(
        "Self", [Rule("expr", [["(", Reference("expr"), ")"], ["x"]])], []
    )
    assert references(unit.entry("expr")) == [Reference("expr", SymbolKind.RULE)]


def test_duplicate_rules_fail():
    with pytest.raises(DuplicateSymbolError) as info:
        buildGrammarUnit("Dup", [Rule("start", [["a"]]), Rule("start", [["b"]])], [])
    assert info.value.identifier == "start"
    assert info.value.source == "Dup"
    assert str(info.value).startswith("Dup:start:")


def test_rule_and_terminal_share_one_namespace():
    with pytest.raises(DuplicateSymbolError):
        buildGrammarUnit("Dup", [Rule("ID", [["a"]])], [Terminal("ID", [["a"]])])


def test_unresolved_reference_fails():
    with pytest.raises(UnresolvedReferenceError) as info:
        buildGrammarUnit("Missing", [Rule("start", [[ZeroOrMore(Reference("nowhere"))]])], [])
    assert info.value.identifier == "start"
    assert "nowhere" in str(info.value)


def test_terminal_referencing_rule_fails():
    with pytest.raises(InvalidReferenceKindError) as info:
        buildGrammarUnit(
            "Kinds",
            rules=[Rule("stmt", [["x"]])],
            terminals=[Terminal("ID", [[Reference("stmt")]])],
        )
    assert info.value.identifier == "ID"
    assert info.value.source == "Kinds"


def test_terminal_may_reference_terminals():
    unit = buildGrammarUnit(
        "Lex",
        rules=[],
        terminals=[
            Terminal("ID", [[Reference("LETTER"), Reference("ID")], [Reference("LETTER")]]),
            Terminal("LETTER", [["a"], ["b"]], isFragment=True),
        ],
    )
    assert {r.kind for r in references(unit.entry("ID"))} == {SymbolKind.TERMINAL}


def test_imported_symbols_are_external():
    unit = buildGrammarUnit(
        "Importer",
        rules=[Rule("start", [[Reference("Common"), Reference("local")]]), Rule("local", [["x"]])],
        terminals=[],
        imports=["Common", "local"],
    )
    kinds = [r.kind for r in references(unit.entry("start"))]
    # a local definition wins over an import of the same name
    assert kinds == [SymbolKind.EXTERNAL, SymbolKind.RULE]
    assert unit.imports == frozenset({"Common", "local"})


def test_non_entries_are_malformed():
    with pytest.raises(MalformedGrammarError):
        buildGrammarUnit("Bad", [Terminal("T", [["a"]])], [])


def test_entries_for_diagramming_skips_fragments(exprUnit):
    names = [e.identifier for e in exprUnit.entriesForDiagramming()]
    assert names == ["expr", "term", "args", "digits", "NUMBER"]
    # fragments still resolve
    assert exprUnit.entry("DIGIT").isFragment


def test_entry_lookup_of_unknown_name(exprUnit):
    with pytest.raises(UnresolvedReferenceError) as info:
        exprUnit.entry("nope")
    assert info.value.source == "Expr"


def test_resolution_is_idempotent(exprUnit):
    again = exprUnit.resolve()
    assert again is not exprUnit
    for first, second in zip(exprUnit, again):
        assert first.identifier == second.identifier
        assert first.alternatives == second.alternatives
    assert len(again) == len(exprUnit) == 6


def test_symbol_table_two_phases():
    table = SymbolTable()
    rule = table.define(Rule("a", [[Reference("b")]]))
    table.define(Rule("b", [["x"]]))
    resolved = table.resolveEntry(rule)
    assert resolved.alternatives == ((Reference("b", SymbolKind.RULE),),)
    assert table.resolveEntry(resolved).alternatives == resolved.alternatives
    assert "a" in table and "c" not in table
    assert table.kindOf("b") is SymbolKind.RULE
    with pytest.raises(UnresolvedReferenceError):
        table.resolve("c")
    with pytest.raises(DuplicateSymbolError):
        table.define(Terminal("b"))


def test_failed_build_does_not_mutate_input():
    rule = Rule("start", [[Sequence("a", Reference("missing"))]])
    with pytest.raises(UnresolvedReferenceError):
        buildGrammarUnit("Partial", [rule], [])
    assert rule.alternatives == ((Sequence("a", Reference("missing")),),)


def test_unit_str(loopUnit):
    assert str(loopUnit) == "grammar Loop\nstart -> 'a' loop\nloop -> 'b'*"


def test_built_unit_is_read_only(loopUnit):
    with pytest.raises(AttributeError):
        loopUnit.rules = ()
    with pytest.raises(AttributeError):
        loopUnit.name = "Other"
    entry = loopUnit.entry("loop")
    with pytest.raises(AttributeError):
        entry.alternatives = ()
    with pytest.raises(AttributeError):
        entry.identifier = "other"
    assert not hasattr(loopUnit, "symbols")
    assert [e.identifier for e in loopUnit.entriesForDiagramming()] == ["start", "loop"]
    assert len(loopUnit) == 2
