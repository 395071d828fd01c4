"""
Recognizers for the RDF, RDFS, OWL and schema.org terms the compiler understands.

Terms are matched by host and path rather than by exact IRI so that the
``http:`` and ``https:`` spellings of schema.org are treated alike.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable
from urllib.parse import urlsplit

from rdflib.term import Literal, Node, URIRef

from ontology_typegen.config import OWL_META_TYPES, OWL_PROPERTY_TYPES, SCHEMA_HOST
from ontology_typegen.errors import MalformedIdentifierError
from ontology_typegen.models import PredicateObject, TypedTopic


@lru_cache(maxsize=None)
def _split(iri: str) -> tuple[str, tuple[str, ...], str | None]:
    """Split an IRI into (hostname, context path segments, name)."""
    parts = urlsplit(iri)
    segments = parts.path.lstrip("/").split("/")
    if parts.fragment:
        return parts.hostname or "", tuple(segments), parts.fragment
    name = segments[-1] or None
    return parts.hostname or "", tuple(segments[:-1]), name


def _last_segment(iri: str) -> str:
    _, path, _ = _split(iri)
    return path[-1] if path else ""


def term_name(term: Node) -> str | None:
    if not isinstance(term, URIRef):
        return None
    return _split(str(term))[2]


def is_rdf_schema(term: Node) -> bool:
    return isinstance(term, URIRef) and _split(str(term))[0] == "www.w3.org" and _last_segment(str(term)) == "rdf-schema"


def is_rdf_syntax(term: Node) -> bool:
    return (
        isinstance(term, URIRef)
        and _split(str(term))[0] == "www.w3.org"
        and re.match(r"^\d\d-rdf-syntax-ns$", _last_segment(str(term))) is not None
    )


def is_schema_object(term: Node) -> bool:
    return isinstance(term, URIRef) and _split(str(term))[0] == SCHEMA_HOST


def is_owl(term: Node) -> bool:
    return isinstance(term, URIRef) and _split(str(term))[0] == "www.w3.org" and _last_segment(str(term)) == "owl"


def schema_name(term: Node) -> str | None:
    """The local name of a schema.org term, or None for any other term."""
    return term_name(term) if is_schema_object(term) else None


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_type(predicate: Node) -> bool:
    return is_rdf_syntax(predicate) and term_name(predicate) == "type"


def is_comment(predicate: Node) -> bool:
    return is_rdf_schema(predicate) and term_name(predicate) == "comment"


def is_domain_includes(predicate: Node) -> bool:
    return (is_schema_object(predicate) and term_name(predicate) == "domainIncludes") or (
        is_rdf_schema(predicate) and term_name(predicate) == "domain"
    )


def is_range_includes(predicate: Node) -> bool:
    return (is_schema_object(predicate) and term_name(predicate) == "rangeIncludes") or (
        is_rdf_schema(predicate) and term_name(predicate) == "range"
    )


def is_superseded_by(predicate: Node) -> bool:
    return is_schema_object(predicate) and term_name(predicate) == "supersededBy"


def get_comment(value: PredicateObject) -> str | None:
    """The comment text if the pair is an ``rdfs:comment`` with a literal object."""
    if is_comment(value.predicate) and isinstance(value.object, Literal):
        return str(value.object)
    return None


def get_subclass_of(value: PredicateObject) -> URIRef | None:
    """The parent class if the pair is an ``rdfs:subClassOf`` statement."""
    if not (is_rdf_schema(value.predicate) and term_name(value.predicate) == "subClassOf"):
        return None
    if not isinstance(value.object, URIRef):
        raise MalformedIdentifierError(f"Unexpected object for predicate 'subClassOf': {value.object!r}.")
    if term_name(value.object) is None:
        raise MalformedIdentifierError(f'Unexpected "unnamed" URL used as a super-class: {value.object}')
    return value.object


def get_types(values: Iterable[PredicateObject]) -> list[URIRef]:
    """Objects of every ``rdf:type`` pair; types may legitimately be empty."""
    types: list[URIRef] = []
    for value in values:
        if not is_type(value.predicate):
            continue
        if not isinstance(value.object, URIRef):
            raise MalformedIdentifierError(f"Unexpected type {value.object!r}")
        types.append(value.object)
    return types


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def is_class_type(term: Node) -> bool:
    return (is_rdf_schema(term) and term_name(term) == "Class") or (is_owl(term) and term_name(term) == "Class")


def is_property_type(term: Node) -> bool:
    if is_rdf_syntax(term) and term_name(term) == "Property":
        return True
    return is_owl(term) and term_name(term) in OWL_PROPERTY_TYPES


def is_data_type(term: Node) -> bool:
    """True for ``schema:DataType`` itself."""
    return schema_name(term) == "DataType"


def has_enum_type(types: Iterable[Node]) -> bool:
    """True if any type is neither a well-known meta type nor an OWL meta type.

    Enumeration members carry the enumeration class itself as their type.
    """
    for t in types:
        if is_class_type(t) or is_property_type(t) or is_data_type(t):
            continue
        if is_owl(t) and term_name(t) in OWL_META_TYPES:
            continue
        return True
    return False


def is_directly_named_class(topic: TypedTopic) -> bool:
    return any(is_class_type(t) for t in topic.types)


def is_subclass(topic: TypedTopic) -> bool:
    return any(get_subclass_of(v) is not None for v in topic.values)


def class_is_data_type(topic: TypedTopic) -> bool:
    return any(is_data_type(t) for t in topic.types)
