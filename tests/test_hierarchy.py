"""
Tests for ancestor closures, cycle breaking and property inheritance.
"""

import pytest
from conftest import RDFS_COMMENT, RDFS_SUBCLASS, cls, prop, s
from rdflib import URIRef

from ontology_typegen.errors import InvalidOntologyError
from ontology_typegen.hierarchy import direct_bases
from ontology_typegen.models import DiagnosticKind

SCHEMA = "https://schema.org/"


def iri(name: str) -> URIRef:
    return URIRef(SCHEMA + name)


class TestClosure:
    def test_ancestors(self, build):
        model = build()
        assert model.classes[iri("DayOfWeek")].ancestors == {iri("Enumeration"), iri("Intangible"), iri("Thing")}
        assert model.classes[iri("Thing")].ancestors == set()

    def test_children_sorted(self, build):
        model = build()
        assert model.classes[iri("Thing")].children == [iri("Action"), iri("Intangible"), iri("Person")]

    def test_descendants(self, build):
        model = build()
        below_person = {r.subject for r in model.classes.values() if iri("Person") in r.ancestors}
        assert below_person == {iri("Patient"), iri("Outpatient")}

    def test_inheritance_is_monotonic(self, build):
        model = build()
        for record in model.classes.values():
            for parent in record.parents:
                inherited = model.classes[parent].properties | model.classes[parent].inherited_properties
                assert inherited <= record.inherited_properties

    def test_inherited_properties(self, build):
        model = build()
        assert model.classes[iri("Outpatient")].inherited_properties >= {iri("name"), iri("knowsAbout"), iri("diagnosis")}

    def test_multiple_inheritance(self, build):
        text = "\n".join(
            [
                cls("Thing"),
                cls("Place", "Thing"),
                cls("Organization", "Thing"),
                cls("LocalBusiness", "Organization", "Place"),
                prop("address", ("Place",), ()),
                prop("founder", ("Organization",), ()),
            ]
        )
        model = build(text + "\n")
        business = model.classes[iri("LocalBusiness")]
        assert business.ancestors == {iri("Place"), iri("Organization"), iri("Thing")}
        assert business.inherited_properties == {iri("address"), iri("founder")}

    def test_direct_bases_drop_redundant_parents(self, build):
        text = "\n".join([cls("Thing"), cls("Person", "Thing"), cls("Patient", "Person", "Thing")])
        model = build(text + "\n")
        assert direct_bases(model.classes[iri("Patient")], model.classes) == [iri("Person")]


class TestCycles:
    """Cycles are broken and reported, never fatal."""

    def test_two_class_cycle(self, build, diagnostics):
        text = "\n".join([cls("A", "B"), cls("B", "A")])
        model = build(text + "\n")
        (cycle,) = diagnostics.of_kind(DiagnosticKind.CYCLE)
        assert "A -> B -> A" in cycle.message or "B -> A -> B" in cycle.message
        a, b = model.classes[iri("A")], model.classes[iri("B")]
        assert not (iri("A") in b.ancestors and iri("B") in a.ancestors)

    def test_self_loop(self, build, diagnostics):
        model = build(cls("Thing", "Thing") + "\n")
        assert model.classes[iri("Thing")].parents == []
        assert len(diagnostics.of_kind(DiagnosticKind.CYCLE)) == 1

    def test_no_class_is_its_own_ancestor(self, build):
        text = "\n".join([cls("A", "C"), cls("B", "A"), cls("C", "B"), cls("D", "C")])
        model = build(text + "\n")
        for record in model.classes.values():
            assert record.subject not in record.ancestors
            for ancestor in record.ancestors:
                assert record.subject not in model.classes[ancestor].ancestors


class TestClassMarking:
    def test_unmarked_class_is_fatal(self, build):
        text = f'{s("Y")} {RDFS_COMMENT} "Not typed." .\n{s("X")} {RDFS_SUBCLASS} {s("Y")} .\n'
        with pytest.raises(InvalidOntologyError, match="not marked as an rdfs:Class"):
            build(text)

    def test_marked_through_an_ancestor(self, build):
        text = cls("Y") + f"\n{s('X')} {RDFS_SUBCLASS} {s('Y')} .\n"
        model = build(text)
        assert model.classes[iri("X")].declared
