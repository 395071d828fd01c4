"""
Model building: classify typed topics into classes, properties and enum members.

Classification only inspects a topic's ``types``:

* an ``rdf:Property`` (or OWL property) type makes a property;
* any type that is not a well-known meta type makes an enumeration member,
  owned by each such type;
* everything else is a class.

Every IRI topic first gets a class record, because properties and enum
members are described with the same vocabulary as classes and are referenced
as classes elsewhere. Only topics classified as classes and typed
``rdfs:Class`` (or having a super-class) are declared for emission.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from rdflib.term import Node, URIRef

from ontology_typegen.config import (
    DATA_TYPE_ALIASES,
    ROLE_CLASSES,
    STRING_LIKE_CLASSES,
)
from ontology_typegen.errors import UnknownIdentifierError
from ontology_typegen.models import DiagnosticKind, Diagnostics, PredicateObject, TypedTopic
from ontology_typegen.utils import derive_name, require_iri, short_str
from ontology_typegen.wellknown import (
    class_is_data_type,
    get_comment,
    get_subclass_of,
    has_enum_type,
    is_class_type,
    is_data_type,
    is_directly_named_class,
    is_domain_includes,
    is_owl,
    is_property_type,
    is_range_includes,
    is_subclass,
    is_superseded_by,
    schema_name,
)


class TopicKind(str, Enum):
    CLASS = "class"
    PROPERTY = "property"
    ENUM_MEMBER = "enum-member"


def classify(types: Iterable[Node]) -> TopicKind:
    types = list(types)
    if any(is_property_type(t) for t in types):
        return TopicKind.PROPERTY
    if has_enum_type(types):
        return TopicKind.ENUM_MEMBER
    return TopicKind.CLASS


def _format_pairs(values: Iterable[PredicateObject]) -> str:
    return ", ".join(f"({short_str(v.predicate)} {short_str(v.object)})" for v in values)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ClassRecord:
    subject: URIRef
    kind: TopicKind = TopicKind.CLASS

    declared: bool = False
    """Typed as a class or has a super-class; only declared classes are emitted."""

    explicit_class: bool = False
    comment: str | None = None
    parents: list[URIRef] = field(default_factory=list)
    superseded_by: list[URIRef] = field(default_factory=list)
    properties: set[URIRef] = field(default_factory=set)
    enum_members: list[URIRef] = field(default_factory=list)

    typedefs: list[str] = field(default_factory=list)
    """Python annotations this class's values may also take, e.g. ``str``."""

    is_data_type: bool = False
    is_data_type_union: bool = False
    is_role: bool = False

    # Filled in by the hierarchy resolver.
    ancestors: set[URIRef] = field(default_factory=set)
    children: list[URIRef] = field(default_factory=list)
    inherited_properties: set[URIRef] = field(default_factory=set)

    @property
    def deprecated(self) -> bool:
        return bool(self.superseded_by)

    def display_name(self, prefixes: tuple[str, ...] = ()) -> str:
        return derive_name(self.subject, prefixes)

    def add(self, value: PredicateObject, model: OntologyModel, diagnostics: Diagnostics) -> bool:
        """Fold one pair into the record; False if the pair is not class vocabulary."""
        comment = get_comment(value)
        if comment is not None:
            if self.comment:
                diagnostics.report(
                    DiagnosticKind.DUPLICATE,
                    self.subject,
                    f"Duplicate comments provided on class {self.subject}. It will be overwritten.",
                )
            self.comment = comment
            return True

        parent = get_subclass_of(value)
        if parent is not None:
            # DataType subclasses rdfs:Class since it is a meta type too.
            if is_class_type(parent) or is_owl(parent):
                return False
            parent_record = model.require_class(parent)
            if parent_record.kind is not TopicKind.CLASS:
                diagnostics.report(
                    DiagnosticKind.UNRECOGNIZED,
                    self.subject,
                    f"Class {short_str(self.subject)}: ignoring super-class {parent}, "
                    f"which is a {parent_record.kind.value}.",
                )
                return True
            if parent not in self.parents:
                self.parents.append(parent)
            return True

        if is_superseded_by(value.predicate):
            replacement = require_iri(value.object)
            model.require_class(replacement)
            if replacement not in self.superseded_by:
                self.superseded_by.append(replacement)
            return True

        return False


@dataclass(eq=False)
class PropertyRecord:
    subject: URIRef
    comment: str | None = None
    domains: list[URIRef] = field(default_factory=list)
    ranges: list[URIRef] = field(default_factory=list)
    superseded_by: list[URIRef] = field(default_factory=list)

    @property
    def deprecated(self) -> bool:
        return bool(self.superseded_by)

    def display_name(self, prefixes: tuple[str, ...] = ()) -> str:
        return derive_name(self.subject, prefixes)

    def _declared_class(self, iri: URIRef, role: str, model: OntologyModel, diagnostics: Diagnostics) -> ClassRecord | None:
        record = model.classes.get(iri)
        if record is None or not record.declared or record.kind is not TopicKind.CLASS:
            diagnostics.report(
                DiagnosticKind.UNRESOLVED_RANGE,
                self.subject,
                f"Property {short_str(self.subject)}: {role} {iri} is not a declared class; ignoring it.",
            )
            return None
        return record

    def add(self, value: PredicateObject, model: OntologyModel, diagnostics: Diagnostics) -> bool:
        comment = get_comment(value)
        if comment is not None:
            if self.comment:
                diagnostics.report(
                    DiagnosticKind.DUPLICATE,
                    self.subject,
                    f"Duplicate comments provided on property {self.subject}. It will be overwritten.",
                )
            self.comment = comment
            return True

        if is_range_includes(value.predicate):
            target = require_iri(value.object)
            if self._declared_class(target, "range", model, diagnostics) and target not in self.ranges:
                self.ranges.append(target)
            return True

        if is_domain_includes(value.predicate):
            target = require_iri(value.object)
            record = self._declared_class(target, "domain", model, diagnostics)
            if record is not None:
                if target not in self.domains:
                    self.domains.append(target)
                record.properties.add(self.subject)
            return True

        if is_superseded_by(value.predicate):
            replacement = require_iri(value.object)
            if replacement not in self.superseded_by:
                self.superseded_by.append(replacement)
            return True

        return False


@dataclass(eq=False)
class EnumMember:
    """A named literal value of one or more enumeration classes."""

    subject: URIRef
    owners: list[URIRef] = field(default_factory=list)
    comment: str | None = None
    superseded_by: list[URIRef] = field(default_factory=list)

    @property
    def deprecated(self) -> bool:
        return bool(self.superseded_by)

    def display_name(self, prefixes: tuple[str, ...] = ()) -> str:
        return derive_name(self.subject, prefixes)

    def add(self, value: PredicateObject, diagnostics: Diagnostics) -> bool:
        comment = get_comment(value)
        if comment is not None:
            if self.comment:
                diagnostics.report(
                    DiagnosticKind.DUPLICATE,
                    self.subject,
                    f"Duplicate comments provided on {self.subject} enum but one already exists. "
                    "It will be overwritten.",
                )
            self.comment = comment
            return True

        if is_superseded_by(value.predicate):
            replacement = require_iri(value.object)
            if replacement not in self.superseded_by:
                self.superseded_by.append(replacement)
            return True

        return False


@dataclass
class OntologyModel:
    """The three registries, keyed by subject IRI."""

    classes: dict[URIRef, ClassRecord] = field(default_factory=dict)
    properties: dict[URIRef, PropertyRecord] = field(default_factory=dict)
    enums: dict[URIRef, EnumMember] = field(default_factory=dict)

    def require_class(self, iri: Node) -> ClassRecord:
        record = self.classes.get(require_iri(iri))
        if record is None:
            raise UnknownIdentifierError(f"Couldn't find class {iri} in any registry.")
        return record

    def declared_classes(self) -> list[ClassRecord]:
        return [c for c in self.classes.values() if c.declared and c.kind is TopicKind.CLASS]


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


def _forward_declare(topic: TypedTopic) -> ClassRecord:
    subject = require_iri(topic.subject)
    record = ClassRecord(subject=subject, kind=classify(topic.types))
    record.declared = is_directly_named_class(topic) or is_subclass(topic)
    record.explicit_class = is_directly_named_class(topic)

    if is_data_type(subject):
        record.is_data_type_union = True
        record.explicit_class = True
        return record

    name = schema_name(subject)
    if name in DATA_TYPE_ALIASES:
        record.typedefs.extend(DATA_TYPE_ALIASES[name])
        record.explicit_class = True
    if class_is_data_type(topic):
        record.is_data_type = True
    if name in STRING_LIKE_CLASSES:
        record.typedefs.append("str")
    if name in ROLE_CLASSES:
        record.is_role = True
        record.explicit_class = True
    return record


def _build_classes(topics: list[TypedTopic], model: OntologyModel, diagnostics: Diagnostics) -> None:
    for topic in topics:
        record = _forward_declare(topic)
        model.classes[record.subject] = record

    for topic in topics:
        record = model.classes[topic.subject]
        if record.kind is not TopicKind.CLASS:
            continue
        if record.is_data_type and not record.typedefs:
            diagnostics.report(
                DiagnosticKind.UNRESOLVED_RANGE,
                record.subject,
                f"Data type {record.subject} has no well-known representation; treating it as text.",
            )
            record.typedefs.append("str")
        rest = [v for v in topic.values if not record.add(v, model, diagnostics)]
        if rest:
            diagnostics.report(
                DiagnosticKind.UNRECOGNIZED,
                record.subject,
                f"Class {short_str(record.subject)}: Did not add [{_format_pairs(rest)}]",
            )


def _build_enums(topics: list[TypedTopic], model: OntologyModel, diagnostics: Diagnostics) -> None:
    for topic in topics:
        if classify(topic.types) is not TopicKind.ENUM_MEMBER:
            continue

        member = EnumMember(subject=require_iri(topic.subject))
        for t in topic.types:
            # A member may also be typed as a class or data type; only its
            # other types are enumerations it belongs to.
            if not has_enum_type([t]):
                continue
            owner = model.require_class(t)
            if owner.kind is not TopicKind.CLASS:
                diagnostics.report(
                    DiagnosticKind.UNRECOGNIZED,
                    member.subject,
                    f"Enum member {short_str(member.subject)}: type {t} is not a class.",
                )
                continue
            owner.enum_members.append(member.subject)
            member.owners.append(t)

        skipped = [v for v in topic.values if not member.add(v, diagnostics)]
        if skipped:
            diagnostics.report(
                DiagnosticKind.UNRECOGNIZED,
                member.subject,
                f"For Enum Item {short_str(member.subject)}, did not process: [{_format_pairs(skipped)}]",
            )
        model.enums[member.subject] = member


def _build_properties(topics: list[TypedTopic], model: OntologyModel, diagnostics: Diagnostics) -> None:
    for topic in topics:
        if classify(topic.types) is not TopicKind.PROPERTY:
            continue

        prop = PropertyRecord(subject=require_iri(topic.subject))
        rest = [v for v in topic.values if not prop.add(v, model, diagnostics)]
        if rest:
            diagnostics.report(
                DiagnosticKind.UNRECOGNIZED,
                prop.subject,
                f"Still unadded for property: {short_str(prop.subject)}: [{_format_pairs(rest)}]",
            )
        model.properties[prop.subject] = prop


def build_model(topics: Iterable[TypedTopic], diagnostics: Diagnostics) -> OntologyModel:
    """Build the class, property and enum registries from typed topics."""
    topics = list(topics)
    model = OntologyModel()
    _build_classes(topics, model, diagnostics)
    _build_enums(topics, model, diagnostics)
    _build_properties(topics, model, diagnostics)
    return model
