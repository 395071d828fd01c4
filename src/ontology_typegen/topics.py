"""
Topic grouping: turn a flat triple sequence into one record per subject.
"""

from typing import Iterable

from ontology_typegen.models import PredicateObject, Topic, Triple, TypedTopic
from ontology_typegen.wellknown import get_types, is_type


def as_topics(triples: Iterable[Triple]) -> list[Topic]:
    """Group triples by subject, keeping each subject's pairs in arrival order."""
    topics: dict[str, Topic] = {}
    for triple in triples:
        key = triple.subject.n3()
        topic = topics.get(key)
        if topic is None:
            topic = topics[key] = Topic(subject=triple.subject)
        topic.values.append(PredicateObject(triple.predicate, triple.object))
    return list(topics.values())


def as_typed_topic(topic: Topic) -> TypedTopic:
    return TypedTopic(
        subject=topic.subject,
        types=get_types(topic.values),
        values=[v for v in topic.values if not is_type(v.predicate)],
    )


def as_typed_topics(triples: Iterable[Triple]) -> list[TypedTopic]:
    """Group triples by subject and split out the ``rdf:type`` statements.

    The result is fully materialized: later passes look topics up by subject.
    """
    return [as_typed_topic(topic) for topic in as_topics(triples)]
