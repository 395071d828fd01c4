"""
Data classes shared by the generation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, NamedTuple

from rdflib.term import Node, URIRef

from ontology_typegen.context import Context


class Triple(NamedTuple):
    """A single subject-predicate-object statement."""

    subject: Node
    predicate: URIRef
    object: Node


class PredicateObject(NamedTuple):
    predicate: URIRef
    object: Node


@dataclass
class Topic:
    """All statements sharing one subject, in arrival order."""

    subject: Node
    values: list[PredicateObject] = field(default_factory=list)


@dataclass
class TypedTopic:
    """A Topic with its ``rdf:type`` statements split out into ``types``."""

    subject: Node

    types: list[URIRef]
    """Objects of every ``rdf:type`` statement about the subject."""

    values: list[PredicateObject]
    """Every other statement about the subject."""


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class DiagnosticKind(str, Enum):
    UNRECOGNIZED = "unrecognized"
    DUPLICATE = "duplicate"
    CYCLE = "cycle"
    UNRESOLVED_RANGE = "unresolved-range"
    NAME_COLLISION = "name-collision"
    SKIPPED_TRIPLE = "skipped-triple"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while compiling the ontology."""

    kind: DiagnosticKind
    subject: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class Diagnostics:
    """Accumulates diagnostics for one run; printing is left to the caller."""

    def __init__(self) -> None:
        self._records: list[Diagnostic] = []

    def report(self, kind: DiagnosticKind, subject: object, message: str) -> None:
        self._records.append(Diagnostic(kind, str(subject), message))

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self._records if d.kind is kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


# ---------------------------------------------------------------------------
# Options and results
# ---------------------------------------------------------------------------


@dataclass
class GeneratorOptions:
    """The only settings that change the generated declarations."""

    include_deprecated: bool = True
    """Emit deprecated classes, properties and enum members (flagged as such)."""

    context: Context = field(default_factory=Context.default)
    """Naming context used to derive names and the ``@context`` literal."""


@dataclass
class GenerationResult:
    """Summary of one generation run."""

    stats: dict[str, int] = field(default_factory=dict)
    """Entity counts: classes, properties, enum_members, declarations."""

    diagnostics: Diagnostics = field(default_factory=Diagnostics)
