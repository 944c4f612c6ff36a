# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, NamedTuple

from . import output as Output
from .errors import GrammarError
from .engine import layout
from .unit import buildGrammarUnit

if TYPE_CHECKING:
    from typing import Callable, Dict, Iterable, List, Optional as Opt, Tuple

    from .elements import Entry, Rule, Terminal
    from .engine import LayoutGeometry, MeasureF
    from .unit import GrammarUnit

    RenderF = Callable[[LayoutGeometry, str], str]
    KeyT = Tuple[str, str, str]

logger = logging.getLogger(__name__)


class GenerationFailure(NamedTuple):
    unit: str
    entry: Opt[str]
    format: str
    message: str

    def __str__(self) -> str:
        entry = f":{self.entry}" if self.entry else ""
        fmt = f" [{self.format}]" if self.format else ""
        return f"{self.unit}{entry}{fmt}: {self.message}"


class GenerationReport:
    """What one generate() run produced, and everything that went wrong.

    artifacts maps (unit name, entry identifier, format) to the rendered text.
    """

    def __init__(self) -> None:
        self.artifacts: Dict[KeyT, str] = {}
        self.failures: List[GenerationFailure] = []

    @property
    def ok(self) -> bool:
        return not self.failures

    def __repr__(self) -> str:
        return (
            f"GenerationReport(artifacts={len(self.artifacts)}, "
            f"failures={len(self.failures)})"
        )


def generateOne(
    unit: GrammarUnit,
    entry: Entry,
    fmt: str,
    measureLabel: Opt[MeasureF],
    render: RenderF,
) -> str:
    measure = measureLabel or Output.measureFor(fmt)
    try:
        geometry = layout(entry, measure)
        return render(geometry, fmt)
    except GrammarError as e:
        raise e.withSource(unit.name)


def generate(
    units: Iterable[GrammarUnit],
    formats: Iterable[str] = ("svg",),
    measureLabel: Opt[MeasureF] = None,
    render: Opt[RenderF] = None,
    maxWorkers: Opt[int] = None,
) -> GenerationReport:
    """Lay out and render every diagrammable entry of every unit, per format.

    Entries are independent, so they run on a thread pool. A failing entry or
    format is recorded in the report and never stops the others.
    """
    render = render or Output.render
    formats = [fmt.strip().lower() for fmt in formats]
    report = GenerationReport()

    with ThreadPoolExecutor(max_workers=maxWorkers) as pool:
        jobs = []
        for unit in units:
            for entry in unit.entriesForDiagramming():
                for fmt in formats:
                    future = pool.submit(
                        generateOne, unit, entry, fmt, measureLabel, render
                    )
                    jobs.append(((unit.name, entry.identifier, fmt), future))

        for key, future in jobs:
            try:
                report.artifacts[key] = future.result()
            except GrammarError as e:
                failure = GenerationFailure(key[0], key[1], key[2], e.message)
                logger.warning("%s", failure)
                report.failures.append(failure)
            except Exception as e:
                # raised by a caller-supplied measureLabel or render
                failure = GenerationFailure(
                    key[0], key[1], key[2], f"{type(e).__name__}: {e}"
                )
                logger.warning("%s", failure, exc_info=e)
                report.failures.append(failure)

    logger.debug("%r", report)
    return report


def buildUnits(
    sources: Iterable[Tuple[str, Iterable[Rule], Iterable[Terminal]]]
) -> Tuple[List[GrammarUnit], List[GenerationFailure]]:
    """Build a unit per (name, rules, terminals) source, collecting failures.

    A source that fails to build is left out; the others are still returned.
    """
    units: List[GrammarUnit] = []
    failures: List[GenerationFailure] = []
    for name, rules, terminals in sources:
        try:
            units.append(buildGrammarUnit(name, rules, terminals))
        except GrammarError as e:
            failure = GenerationFailure(name, e.identifier, "", e.message)
            logger.warning("%s", failure)
            failures.append(failure)
    return units, failures
