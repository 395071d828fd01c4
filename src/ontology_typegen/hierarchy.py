"""
Class hierarchy resolution: ancestor closures, children and inherited properties.

Super-class edges form a directed graph over the class registry. A class may
have any number of parents; an edge that would close a cycle is dropped and
reported.
"""

from __future__ import annotations

from typing import Iterator

from rdflib.term import URIRef

from ontology_typegen.builder import ClassRecord, OntologyModel
from ontology_typegen.errors import InvalidOntologyError
from ontology_typegen.models import DiagnosticKind, Diagnostics
from ontology_typegen.utils import short_str


def _resolve_from(
    start: URIRef,
    classes: dict[URIRef, ClassRecord],
    done: set[URIRef],
    diagnostics: Diagnostics,
) -> None:
    stack: list[tuple[URIRef, Iterator[URIRef]]] = [(start, iter(list(classes[start].parents)))]
    on_path = {start}
    kept: dict[URIRef, list[URIRef]] = {start: []}

    while stack:
        iri, parents = stack[-1]
        for parent in parents:
            if parent in on_path:
                path = [frame[0] for frame in stack]
                cycle = path[path.index(parent):] + [parent]
                diagnostics.report(
                    DiagnosticKind.CYCLE,
                    iri,
                    "Cycle detected in super-classes ("
                    + " -> ".join(short_str(c) for c in cycle)
                    + f"); dropping {short_str(iri)} subClassOf {short_str(parent)}.",
                )
                continue
            kept[iri].append(parent)
            if parent not in done:
                on_path.add(parent)
                kept[parent] = []
                stack.append((parent, iter(list(classes[parent].parents))))
                break
        else:
            stack.pop()
            on_path.discard(iri)
            record = classes[iri]
            record.parents = kept.pop(iri)
            record.ancestors = set()
            for parent in record.parents:
                record.ancestors.add(parent)
                record.ancestors |= classes[parent].ancestors
            done.add(iri)


def _is_marked_as_class(record: ClassRecord, classes: dict[URIRef, ClassRecord]) -> bool:
    return record.explicit_class or any(classes[a].explicit_class for a in record.ancestors)


def resolve_hierarchy(model: OntologyModel, diagnostics: Diagnostics) -> None:
    """Break cycles, then fill ``ancestors``, ``children`` and ``inherited_properties``.

    Raises
    ------
    InvalidOntologyError:
        If a declared class is not typed as a class and neither is any ancestor.
    """
    classes = model.classes
    done: set[URIRef] = set()
    for iri in sorted(classes, key=str):
        if iri not in done:
            _resolve_from(iri, classes, done, diagnostics)

    for record in classes.values():
        record.children = []
    for iri in sorted(classes, key=str):
        for parent in classes[iri].parents:
            classes[parent].children.append(iri)

    for record in classes.values():
        inherited: set[URIRef] = set()
        for ancestor in record.ancestors:
            inherited |= classes[ancestor].properties
        record.inherited_properties = inherited

    for record in model.declared_classes():
        if not _is_marked_as_class(record, classes):
            raise InvalidOntologyError(
                f"Class {short_str(record.subject)} is not marked as an rdfs:Class, "
                "and neither are any of its parents."
            )


def direct_bases(record: ClassRecord, classes: dict[URIRef, ClassRecord]) -> list[URIRef]:
    """Parents that are not already an ancestor of another parent."""
    return [
        parent
        for parent in record.parents
        if not any(parent in classes[other].ancestors for other in record.parents if other != parent)
    ]
