"""
Property type algebra.

Computes, symbolically, the value type every property accepts and the total
type every class stands for. The emitter turns these expressions into Python
annotations; nothing here knows about the output syntax beyond builtin
annotation names.

A property's value is a union of its range classes (each of which may carry
typedefs, such as ``str`` for Text or a numeric string for Number), plus an
``IdReference`` when any range is a node type. When the vocabulary has a role
class, the value may also be a role wrapper qualifying the property; the
wrapper carries the unwrapped value only, so qualification is one level deep.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Union

from rdflib.term import URIRef

from ontology_typegen.builder import ClassRecord, EnumMember, OntologyModel, PropertyRecord, TopicKind
from ontology_typegen.config import ACTION_CLASS, ACTION_SPECIFICATION_CLASS
from ontology_typegen.models import DiagnosticKind, Diagnostics, GeneratorOptions
from ontology_typegen.utils import named_portion_or_empty, short_str
from ontology_typegen.wellknown import schema_name

TEXT = "str"
ID_REFERENCE = "IdReference"


@dataclass(frozen=True)
class Builtin:
    """A helper or Python builtin annotation, e.g. ``str`` or ``NumberString``."""

    annotation: str


@dataclass(frozen=True)
class ClassRef:
    """The total type of a class."""

    iri: URIRef


@dataclass(frozen=True)
class LeafRef:
    """The ``@type``-carrying model of a node class."""

    iri: URIRef


@dataclass(frozen=True)
class QualifiedRef:
    """The role wrapper qualifying a value of ``prop``."""

    prop: URIRef


@dataclass(frozen=True)
class EnumLiterals:
    values: tuple[str, ...]


@dataclass(frozen=True)
class ListOf:
    item: TypeUnion


TypeExpr = Union[Builtin, ClassRef, LeafRef, QualifiedRef, EnumLiterals, ListOf]


@dataclass(frozen=True)
class TypeUnion:
    members: tuple[TypeExpr, ...]

    @classmethod
    def of(cls, members: Iterable[TypeExpr]) -> TypeUnion:
        unique: list[TypeExpr] = []
        for member in members:
            if member not in unique:
                unique.append(member)
        return cls(tuple(unique))

    def __bool__(self) -> bool:
        return bool(self.members)


def sort_key(iri: URIRef) -> tuple[str, str]:
    """Order by local name, then by full IRI."""
    return named_portion_or_empty(iri), str(iri)


class TypeAlgebra:
    def __init__(self, model: OntologyModel, options: GeneratorOptions, diagnostics: Diagnostics) -> None:
        self.model = model
        self.options = options
        self.diagnostics = diagnostics
        self._node_types: dict[URIRef, bool] = {}
        self._typedefs: dict[URIRef, tuple[str, ...]] = {}
        self._reported: set[tuple[str, URIRef]] = set()
        self._excluded: set[URIRef] = set()

    # -- Visibility ---------------------------------------------------------

    def visible(self, record: ClassRecord | PropertyRecord | EnumMember) -> bool:
        """False for deprecated elements when deprecated elements are excluded."""
        return self.options.include_deprecated or not record.deprecated

    def is_emitted(self, record: ClassRecord) -> bool:
        return (
            record.declared
            and record.kind is TopicKind.CLASS
            and record.subject not in self._excluded
            and self.visible(record)
        )

    def exclude(self, record: ClassRecord) -> None:
        """Drop a class from emission, e.g. after a name collision."""
        self._excluded.add(record.subject)
        self.__dict__.pop("has_role", None)

    def emitted_classes(self) -> list[ClassRecord]:
        return sorted(
            (c for c in self.model.classes.values() if self.is_emitted(c)),
            key=lambda c: sort_key(c.subject),
        )

    def emitted_properties(self, iris: Iterable[URIRef]) -> list[PropertyRecord]:
        props = (self.model.properties[i] for i in iris if i in self.model.properties)
        return sorted((p for p in props if self.visible(p)), key=lambda p: sort_key(p.subject))

    def _report_once(self, kind: DiagnosticKind, iri: URIRef, message: str) -> None:
        if (kind.value, iri) not in self._reported:
            self._reported.add((kind.value, iri))
            self.diagnostics.report(kind, iri, message)

    # -- Classes ------------------------------------------------------------

    def is_node_type(self, record: ClassRecord) -> bool:
        """Whether values of the class are JSON-LD nodes rather than plain values."""
        cached = self._node_types.get(record.subject)
        if cached is not None:
            return cached
        if record.is_data_type or record.is_data_type_union:
            result = False
        elif record.properties:
            result = True
        else:
            result = all(self.is_node_type(self.model.classes[p]) for p in record.parents)
        self._node_types[record.subject] = result
        return result

    def class_typedefs(self, record: ClassRecord) -> tuple[str, ...]:
        """Own typedefs plus every ancestor's, deduplicated and sorted."""
        cached = self._typedefs.get(record.subject)
        if cached is not None:
            return cached
        typedefs = set(record.typedefs)
        for parent in record.parents:
            typedefs.update(self.class_typedefs(self.model.classes[parent]))
        result = tuple(sorted(typedefs))
        self._typedefs[record.subject] = result
        return result

    def enum_literal_values(self, member: EnumMember) -> tuple[str, ...]:
        """The IRI, the https form of an http IRI, and the scoped name."""
        iri = str(member.subject)
        values = [iri]
        if iri.startswith("http:"):
            values.append("https:" + iri[len("http:"):])
        scoped = self.options.context.scoped_name(iri)
        if scoped not in values:
            values.append(scoped)
        return tuple(values)

    def visible_enum_members(self, record: ClassRecord) -> list[EnumMember]:
        members = (self.model.enums[i] for i in record.enum_members if i in self.model.enums)
        return sorted((m for m in members if self.visible(m)), key=lambda m: sort_key(m.subject))

    def visible_children(self, record: ClassRecord) -> list[ClassRecord]:
        """Emitted sub-classes; a skipped child is replaced by its own children."""
        found: list[ClassRecord] = []
        seen: set[URIRef] = set()
        pending = list(record.children)
        while pending:
            child = self.model.classes[pending.pop()]
            if child.subject in seen:
                continue
            seen.add(child.subject)
            if self.is_emitted(child):
                found.append(child)
            else:
                pending.extend(child.children)
        return sorted(found, key=lambda c: sort_key(c.subject))

    def class_total_type(self, record: ClassRecord) -> TypeUnion:
        """Enum literals | leaf model | sub-class types | typedefs."""
        if record.is_data_type_union:
            return self.data_type_union()

        members: list[TypeExpr] = []
        literals = [v for m in self.visible_enum_members(record) for v in self.enum_literal_values(m)]
        if literals:
            members.append(EnumLiterals(tuple(literals)))
        if self.is_node_type(record):
            members.append(LeafRef(record.subject))
        members.extend(ClassRef(c.subject) for c in self.visible_children(record))
        members.extend(Builtin(t) for t in self.class_typedefs(record))

        if not members:
            self._report_once(
                DiagnosticKind.UNRESOLVED_RANGE,
                record.subject,
                f"Class {short_str(record.subject)} has no values; treating it as text.",
            )
            members.append(Builtin(TEXT))
        return TypeUnion.of(members)

    def data_type_union(self) -> TypeUnion:
        data_types = [c for c in self.emitted_classes() if c.is_data_type]
        if not data_types:
            return TypeUnion.of([Builtin(TEXT)])
        return TypeUnion.of(ClassRef(c.subject) for c in data_types)

    # -- Roles and actions ----------------------------------------------------

    def role_family(self) -> list[ClassRecord]:
        """Emitted node classes that are role classes or descend from one."""
        classes = self.model.classes
        return [
            c
            for c in self.emitted_classes()
            if self.is_node_type(c) and (c.is_role or any(classes[a].is_role for a in c.ancestors))
        ]

    @cached_property
    def has_role(self) -> bool:
        return bool(self.role_family())

    def find_schema_class(self, name: str) -> ClassRecord | None:
        for record in self.emitted_classes():
            if schema_name(record.subject) == name:
                return record
        return None

    def action_class(self) -> ClassRecord | None:
        record = self.find_schema_class(ACTION_CLASS)
        return record if record is not None and self.is_node_type(record) else None

    def action_specification_type(self) -> TypeUnion:
        spec = self.find_schema_class(ACTION_SPECIFICATION_CLASS)
        members: list[TypeExpr] = [ClassRef(spec.subject)] if spec is not None else []
        return TypeUnion.of(members + [Builtin(TEXT)])

    # -- Properties ------------------------------------------------------------

    def scalar_type(self, prop: PropertyRecord) -> TypeUnion:
        """Union of the property's range types, without role qualification."""
        ranges = sorted(
            (self.model.classes[r] for r in prop.ranges if self.is_emitted(self.model.classes[r])),
            key=lambda c: sort_key(c.subject),
        )
        members: list[TypeExpr] = [ClassRef(c.subject) for c in ranges]
        if any(self.is_node_type(c) for c in ranges):
            members.append(Builtin(ID_REFERENCE))

        if not members:
            self._report_once(
                DiagnosticKind.UNRESOLVED_RANGE,
                prop.subject,
                f"Property {short_str(prop.subject)} has no usable range; treating it as text.",
            )
            members.append(Builtin(TEXT))
        return TypeUnion.of(members)

    def field_type(self, prop: PropertyRecord) -> TypeUnion:
        """A single value or a list of values, each possibly role-qualified."""
        item = list(self.scalar_type(prop).members)
        if self.has_role:
            item.append(QualifiedRef(prop.subject))
        item_union = TypeUnion.of(item)
        return TypeUnion.of(item + [ListOf(item_union)])
