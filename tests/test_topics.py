"""
Tests for grouping triples into topics and splitting out rdf:type statements.
"""

import pytest
from rdflib import Literal, URIRef
from rdflib.namespace import RDF, RDFS

from ontology_typegen.errors import MalformedIdentifierError
from ontology_typegen.models import Triple
from ontology_typegen.topics import as_topics, as_typed_topics

THING = URIRef("https://schema.org/Thing")
PERSON = URIRef("https://schema.org/Person")


@pytest.fixture
def triples() -> list[Triple]:
    return [
        Triple(THING, RDF.type, RDFS.Class),
        Triple(PERSON, RDF.type, RDFS.Class),
        Triple(THING, RDFS.comment, Literal("The most generic type of item.")),
        Triple(PERSON, RDFS.subClassOf, THING),
        Triple(PERSON, RDFS.comment, Literal("A person.")),
    ]


class TestGrouping:
    """as_topics partitions by subject and keeps per-subject order."""

    def test_one_topic_per_subject(self, triples):
        topics = as_topics(triples)
        assert [t.subject for t in topics] == [THING, PERSON]

    def test_pairs_keep_arrival_order(self, triples):
        person = as_topics(triples)[1]
        assert [v.predicate for v in person.values] == [RDF.type, RDFS.subClassOf, RDFS.comment]

    def test_empty_input(self):
        assert as_topics([]) == []

    def test_every_subject_of_sample_vocabulary(self, schema_triples):
        subjects = {t.subject for t in schema_triples}
        assert {t.subject for t in as_topics(schema_triples)} == subjects
        assert len(as_topics(schema_triples)) == len(subjects)


class TestTypedTopics:
    """as_typed_topics moves rdf:type objects into ``types``."""

    def test_types_split_out(self, triples):
        thing, person = as_typed_topics(triples)
        assert thing.types == [RDFS.Class]
        assert person.types == [RDFS.Class]
        assert all(v.predicate != RDF.type for v in person.values)
        assert len(person.values) == 2

    def test_untyped_topic_has_no_types(self):
        (topic,) = as_typed_topics([Triple(THING, RDFS.comment, Literal("x"))])
        assert topic.types == []
        assert len(topic.values) == 1

    def test_literal_type_is_malformed(self):
        with pytest.raises(MalformedIdentifierError):
            as_typed_topics([Triple(THING, RDF.type, Literal("Class"))])
