"""Tests for batch generation over many units."""

import logging

from railroad_grammar import (
    GenerationFailure,
    Reference,
    Rule,
    buildUnits,
    generate,
)


def test_artifacts_per_entry_and_format(loopUnit, exprUnit, measure):
    report = generate([loopUnit, exprUnit], formats=["svg", "html"], measureLabel=measure)
    assert report.ok
    assert set(report.artifacts) == {
        (unit, entry, fmt)
        for unit, entries in [
            ("Loop", ["start", "loop"]),
            ("Expr", ["expr", "term", "args", "digits", "NUMBER"]),
        ]
        for entry in entries
        for fmt in ["svg", "html"]
    }
    assert report.artifacts[("Loop", "loop", "svg")].startswith("<svg")
    assert report.artifacts[("Loop", "loop", "html")].startswith("<!doctype html>")


def test_fragments_are_skipped(exprUnit, measure):
    report = generate([exprUnit], measureLabel=measure)
    assert not any(entry == "DIGIT" for _, entry, _ in report.artifacts)


def test_failing_entry_does_not_stop_the_others(loopUnit, measure, caplog):
    def broken(text):
        return 0 if text == "b" else measure(text)

    with caplog.at_level(logging.WARNING, logger="railroad_grammar.batch"):
        report = generate([loopUnit], measureLabel=broken, maxWorkers=2)
    assert not report.ok
    assert list(report.artifacts) == [("Loop", "start", "svg")]
    [failure] = report.failures
    assert failure.unit == "Loop"
    assert failure.entry == "loop"
    assert failure.format == "svg"
    assert "'b'" in failure.message
    assert "Loop:loop [svg]" in caplog.text


def test_unknown_format_is_a_failure(loopUnit, measure):
    report = generate([loopUnit], formats=["svg", "png"], measureLabel=measure)
    assert len(report.artifacts) == 2
    assert {f.format for f in report.failures} == {"png"}
    assert len(report.failures) == 2


def test_custom_renderer(loopUnit, measure):
    report = generate(
        [loopUnit],
        formats=["txt"],
        measureLabel=measure,
        render=lambda geometry, fmt: f"{geometry.identifier} {geometry.width}",
    )
    assert report.artifacts[("Loop", "loop", "txt")] == "loop 170"


def test_build_units_collects_failures():
    units, failures = buildUnits(
        [
            ("Good", [Rule("start", [["a"]])], []),
            ("Bad", [Rule("start", [[Reference("missing")]])], []),
        ]
    )
    assert [u.name for u in units] == ["Good"]
    assert failures == [
        GenerationFailure("Bad", "start", "", failures[0].message)
    ]
    assert "missing" in failures[0].message


def test_failure_str():
    assert str(GenerationFailure("U", "e", "svg", "boom")) == "U:e [svg]: boom"
    assert str(GenerationFailure("U", None, "", "boom")) == "U: boom"


def test_non_finite_width_fails_one_entry(loopUnit, measure):
    def broken(text):
        return float("nan") if text == "b" else measure(text)

    report = generate([loopUnit], measureLabel=broken)
    assert list(report.artifacts) == [("Loop", "start", "svg")]
    assert [(f.entry, f.format) for f in report.failures] == [("loop", "svg")]


def test_renderer_errors_are_collected(loopUnit, measure):
    def render(geometry, fmt):
        if geometry.identifier == "loop":
            raise RuntimeError("disk full")
        return geometry.identifier

    report = generate([loopUnit], measureLabel=measure, render=render)
    assert report.artifacts == {("Loop", "start", "svg"): "start"}
    [failure] = report.failures
    assert failure.entry == "loop"
    assert failure.message == "RuntimeError: disk full"
