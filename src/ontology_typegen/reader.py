"""
Ontology ingestion with rdflib.

Loads an RDF source (a URL or a local file; N-Triples unless the name says
otherwise) and hands the compiler its triples, minus the statements it never
looks at: owl/skos equivalences, labels, the schema.org meta vocabulary and
blank-node subjects.
"""

import asyncio
import re
from pathlib import Path
from typing import BinaryIO, Iterable

from rdflib import BNode, Graph
from rdflib.plugins.parsers.ntriples import W3CNTriplesParser
from rdflib.term import Node
from rdflib.util import guess_format

from ontology_typegen.config import (
    DEFAULT_RDF_FORMAT,
    NTRIPLES_FORMATS,
    SKIPPED_PREDICATE_PATTERNS,
    SKIPPED_PREDICATES,
    SKIPPED_SUBJECT_PATTERNS,
)
from ontology_typegen.models import DiagnosticKind, Diagnostics, Triple

_SKIPPED_SUBJECTS = [re.compile(p) for p in SKIPPED_SUBJECT_PATTERNS]
_SKIPPED_PREDICATES = [re.compile(p) for p in SKIPPED_PREDICATE_PATTERNS]


def is_skipped(triple: Triple) -> bool:
    """True for statements the compiler ignores without comment."""
    subject, predicate = str(triple.subject), str(triple.predicate)
    if predicate in SKIPPED_PREDICATES:
        return True
    if any(p.search(subject) for p in _SKIPPED_SUBJECTS):
        return True
    return any(p.search(predicate) for p in _SKIPPED_PREDICATES)


def filter_triples(triples: Iterable[tuple], diagnostics: Diagnostics) -> list[Triple]:
    """Drop ignored statements; blank-node subjects are dropped and reported."""
    kept: list[Triple] = []
    for s, p, o in triples:
        triple = Triple(s, p, o)
        if isinstance(s, BNode):
            diagnostics.report(
                DiagnosticKind.SKIPPED_TRIPLE,
                s,
                f"Skipping statement about blank node {s.n3()}: {p.n3()} {o.n3()}",
            )
            continue
        if not is_skipped(triple):
            kept.append(triple)
    return kept


class _ArrivalOrder:
    """Parser sink that keeps every statement, repeats included, as it arrives."""

    def __init__(self) -> None:
        self.triples: list[tuple[Node, Node, Node]] = []

    def triple(self, s: Node, p: Node, o: Node) -> None:
        self.triples.append((s, p, o))


def read_ntriples(stream: BinaryIO) -> list[tuple[Node, Node, Node]]:
    """Parse an N-Triples byte stream in arrival order."""
    sink = _ArrivalOrder()
    W3CNTriplesParser(sink=sink).parse(stream)
    return sink.triples


def load_graph(source: str | Path, rdf_format: str | None = None) -> Graph:
    """Parse ``source`` into an rdflib Graph.

    A graph holds each statement once and groups a subject's statements by
    predicate, so arrival order is lost; ``load_triples`` avoids it for
    N-Triples files.

    Parameters
    ----------
    source:
        URL or local path of the ontology.
    rdf_format:
        rdflib parser name. Guessed from the file extension, defaulting to
        N-Triples.

    Raises
    ------
    FileNotFoundError:
        If ``source`` is a local path that does not exist.
    """
    if isinstance(source, Path) and not source.exists():
        raise FileNotFoundError(f"Ontology file not found: {source}")

    graph = Graph()
    graph.parse(source=str(source), format=rdf_format or guess_format(str(source)) or DEFAULT_RDF_FORMAT)
    return graph


def load_triples(source: str | Path, rdf_format: str | None = None) -> list[tuple[Node, Node, Node]]:
    """Every statement of ``source``.

    Local N-Triples files are read line by line, in arrival order and with
    repeats. URLs and other formats go through ``load_graph``.
    """
    rdf_format = rdf_format or guess_format(str(source)) or DEFAULT_RDF_FORMAT
    if isinstance(source, Path) and rdf_format in NTRIPLES_FORMATS:
        if not source.exists():
            raise FileNotFoundError(f"Ontology file not found: {source}")
        with source.open("rb") as stream:
            return read_ntriples(stream)
    return list(load_graph(source, rdf_format))


async def read_triples(
    source: str | Path,
    diagnostics: Diagnostics,
    rdf_format: str | None = None,
) -> list[Triple]:
    """Load every triple of ``source``; parsing runs in a worker thread."""
    triples = await asyncio.to_thread(load_triples, source, rdf_format)
    return filter_triples(triples, diagnostics)


def parse_ntriples(text: str, diagnostics: Diagnostics | None = None) -> list[Triple]:
    """Parse in-memory N-Triples content in arrival order."""
    sink = _ArrivalOrder()
    W3CNTriplesParser(sink=sink).parsestring(text)
    return filter_triples(sink.triples, diagnostics if diagnostics is not None else Diagnostics())
