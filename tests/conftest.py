"""
Pytest fixtures for ontology-typegen tests.

Provides a small schema.org-shaped vocabulary in N-Triples and a loader that
imports generated source as a real module.
"""

import sys
import types
from collections.abc import Callable, Generator

import pytest

from ontology_typegen.builder import OntologyModel, build_model
from ontology_typegen.generator import compile_source
from ontology_typegen.hierarchy import resolve_hierarchy
from ontology_typegen.models import Diagnostics, GeneratorOptions
from ontology_typegen.reader import parse_ntriples
from ontology_typegen.topics import as_typed_topics

RDF_TYPE = "<http://www.w3.org/1999/02/22-rdf-syntax-ns#type>"
RDF_PROPERTY = "<http://www.w3.org/1999/02/22-rdf-syntax-ns#Property>"
RDFS_CLASS = "<http://www.w3.org/2000/01/rdf-schema#Class>"
RDFS_SUBCLASS = "<http://www.w3.org/2000/01/rdf-schema#subClassOf>"
RDFS_COMMENT = "<http://www.w3.org/2000/01/rdf-schema#comment>"
RDFS_LABEL = "<http://www.w3.org/2000/01/rdf-schema#label>"


def s(name: str) -> str:
    return f"<https://schema.org/{name}>"


DOMAIN = s("domainIncludes")
RANGE = s("rangeIncludes")
SUPERSEDED_BY = s("supersededBy")


def cls(name: str, *parents: str, comment: str | None = None, rdf_types: tuple[str, ...] = (RDFS_CLASS,)) -> str:
    lines = [f"{s(name)} {RDF_TYPE} {t} ." for t in rdf_types]
    lines += [f"{s(name)} {RDFS_SUBCLASS} {s(p)} ." for p in parents]
    if comment:
        lines.append(f'{s(name)} {RDFS_COMMENT} "{comment}" .')
    return "\n".join(lines)


def prop(name: str, domains: tuple[str, ...], ranges: tuple[str, ...], comment: str | None = None) -> str:
    lines = [f"{s(name)} {RDF_TYPE} {RDF_PROPERTY} ."]
    lines += [f"{s(name)} {DOMAIN} {s(d)} ." for d in domains]
    lines += [f"{s(name)} {RANGE} {s(r)} ." for r in ranges]
    if comment:
        lines.append(f'{s(name)} {RDFS_COMMENT} "{comment}" .')
    return "\n".join(lines)


def member(name: str, owner: str) -> str:
    return f"{s(name)} {RDF_TYPE} {s(owner)} ."


# =============================================================================
# SAMPLE VOCABULARY
# =============================================================================

SCHEMA_NT = "\n".join(
    [
        cls("Thing", comment="The most generic type of item."),
        f'{s("Thing")} {RDFS_LABEL} "Thing" .',
        cls("Person", "Thing", comment="A person (alive, dead, undead, or fictional)."),
        cls("Intangible", "Thing"),
        cls("Role", "Intangible", comment="Represents additional information about a relationship or property."),
        cls("Enumeration", "Intangible"),
        cls("DayOfWeek", "Enumeration", comment="The day of the week."),
        member("Monday", "DayOfWeek"),
        member("Sunday", "DayOfWeek"),
        member("PublicHolidays", "DayOfWeek"),
        f"{s('PublicHolidays')} {SUPERSEDED_BY} {s('Sunday')} .",
        cls("Action", "Thing", comment="An action performed by a direct agent."),
        cls("PropertyValueSpecification", "Intangible"),
        cls("Patient", "Person", comment="A patient is any person recipient of health care services."),
        f"{s('Patient')} {SUPERSEDED_BY} {s('Person')} .",
        cls("Outpatient", "Patient"),
        # Data types
        cls("DataType", rdf_types=(RDFS_CLASS,)),
        f"{s('DataType')} {RDFS_SUBCLASS} {RDFS_CLASS} .",
        cls("Text", rdf_types=(s("DataType"), RDFS_CLASS)),
        cls("URL", "Text"),
        cls("Number", rdf_types=(s("DataType"), RDFS_CLASS)),
        cls("Integer", "Number"),
        cls("Boolean", rdf_types=(s("DataType"), RDFS_CLASS)),
        member("True", "Boolean"),
        member("False", "Boolean"),
        # Properties
        prop("name", ("Thing",), ("Text",), comment="The name of the item."),
        prop("knowsAbout", ("Person",), ("Thing", "Text", "URL")),
        prop("familyName", ("Person",), ("Text",)),
        prop("surname", ("Person",), ("Text",)),
        f"{s('surname')} {SUPERSEDED_BY} {s('familyName')} .",
        prop("height", ("Person",), ("Number",)),
        prop("dayOfWeek", ("Person",), ("DayOfWeek",)),
        prop("diagnosis", ("Patient",), ("Text",)),
        prop("roleName", ("Role",), ("Text", "URL")),
        prop("startDate", ("Role",), ("Text",)),
        prop("target", ("Action",), ("URL",)),
        prop("valueRequired", ("PropertyValueSpecification",), ("Boolean",)),
        prop("valueName", ("PropertyValueSpecification",), ("Text",)),
    ]
) + "\n"


@pytest.fixture
def schema_nt() -> str:
    """The sample vocabulary as N-Triples."""
    return SCHEMA_NT


@pytest.fixture
def schema_triples():
    """The sample vocabulary as parsed triples."""
    return parse_ntriples(SCHEMA_NT)


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


# =============================================================================
# GENERATED MODULES
# =============================================================================


@pytest.fixture
def load_module() -> Generator[Callable[[str], types.ModuleType], None, None]:
    """Execute generated source as a module registered in ``sys.modules``."""
    loaded: list[str] = []

    def load(source: str) -> types.ModuleType:
        name = f"generated_types_{len(loaded)}_{id(source)}"
        module = types.ModuleType(name)
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(source, f"<{name}>", "exec"), module.__dict__)
        return module

    yield load
    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def generate(load_module) -> Callable[..., types.ModuleType]:
    """Compile N-Triples text and load the result."""

    def run(text: str = SCHEMA_NT, **options) -> types.ModuleType:
        source, _ = compile_source(parse_ntriples(text), GeneratorOptions(**options))
        return load_module(source)

    return run


@pytest.fixture(scope="module")
def schema_source() -> str:
    source, _ = compile_source(parse_ntriples(SCHEMA_NT))
    return source


@pytest.fixture
def build(diagnostics):
    """Build and resolve a model from N-Triples text."""

    def run(text: str = SCHEMA_NT) -> OntologyModel:
        model = build_model(as_typed_topics(parse_ntriples(text, diagnostics)), diagnostics)
        resolve_hierarchy(model, diagnostics)
        return model

    return run
