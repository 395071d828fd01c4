"""
Shared configuration: defaults and well-known vocabulary constants.
"""

from rdflib.namespace import DCTERMS, OWL, RDFS, SKOS

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_CONTEXT = "https://schema.org"
DEFAULT_ONTOLOGY = "https://schema.org/version/latest/schemaorg-current-https.nt"
DEFAULT_RDF_FORMAT = "nt"
# rdflib parser names read line by line, keeping statement order and repeats.
NTRIPLES_FORMATS = frozenset({"nt", "nt11", "ntriples"})

# Environment variables (a .env file is honoured) backing the CLI defaults.
ENV_ONTOLOGY = "TYPEGEN_ONTOLOGY"
ENV_CONTEXT = "TYPEGEN_CONTEXT"

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------
SCHEMA_HOST = "schema.org"

# Triples the ingestion layer drops before grouping.
SKIPPED_PREDICATES = frozenset(
    str(p)
    for p in (
        OWL.equivalentClass,
        OWL.equivalentProperty,
        DCTERMS.source,
        RDFS.label,
        SKOS.closeMatch,
        SKOS.exactMatch,
    )
)
SKIPPED_SUBJECT_PATTERNS = (
    r"file:///",
    r"^https?://meta\.schema\.org/",
)
SKIPPED_PREDICATE_PATTERNS = (r"^https?://schema\.org/isPartOf$",)

# OWL types that describe the ontology itself, never an enumeration.
OWL_META_TYPES = frozenset(
    {
        "Ontology",
        "Class",
        "DatatypeProperty",
        "ObjectProperty",
        "FunctionalProperty",
        "InverseFunctionalProperty",
        "AnnotationProperty",
        "SymmetricProperty",
        "TransitiveProperty",
    }
)
OWL_PROPERTY_TYPES = frozenset({"DatatypeProperty", "ObjectProperty"})

# schema.org data types and the Python annotation each one stands for. Numbers
# and booleans are strict, so text only reaches a Number through NumberString.
DATA_TYPE_ALIASES: dict[str, tuple[str, ...]] = {
    "Text": ("str",),
    "Number": ("StrictFloat", "NumberString"),
    "Time": ("str",),
    "Date": ("str",),
    "DateTime": ("str",),
    "Boolean": ("StrictBool",),
}

# Classes whose values may also be given as a plain string.
STRING_LIKE_CLASSES = frozenset({"Quantity", "EntryPoint", "Organization", "Person", "Place"})

# Classes whose instances qualify another property's value.
ROLE_CLASSES = frozenset(
    {"Role", "OrganizationRole", "EmployeeRole", "LinkRole", "PerformanceRole"}
)

ACTION_CLASS = "Action"
ACTION_SPECIFICATION_CLASS = "PropertyValueSpecification"

# Optional sign, digits, optional decimal fraction.
NUMBER_STRING_PATTERN = r"^[+-]?\d+(\.\d+)?$"
