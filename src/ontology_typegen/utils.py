"""
Utility helpers: console, IRI name extraction, identifier sanitizing.
"""

import keyword
import re
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel
from rdflib.term import Node, URIRef
from rich.console import Console

from ontology_typegen.errors import MalformedIdentifierError

# Generated declarations go to stdout or a file; everything else goes here.
console = Console(stderr=True)

_NOT_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")

# Attribute names the generated models use for JSON-LD keywords.
KEYWORD_ATTRIBUTES = frozenset({"at_id", "at_type", "at_context", "at_graph"})
_RESERVED_ATTRIBUTES = frozenset(dir(BaseModel)) | KEYWORD_ATTRIBUTES


def named_portion_or_empty(iri: str) -> str:
    """Return the fragment of an IRI, or its final path segment.

    Examples
    --------
    >>> named_portion_or_empty("https://schema.org/Thing")
    'Thing'
    >>> named_portion_or_empty("http://www.w3.org/2000/01/rdf-schema#Class")
    'Class'
    >>> named_portion_or_empty("https://schema.org/")
    ''
    """
    parts = urlsplit(str(iri))
    if parts.fragment:
        return parts.fragment
    return parts.path.split("/")[-1]


def named_portion(iri: str) -> str:
    name = named_portion_or_empty(iri)
    if not name:
        raise MalformedIdentifierError(
            f"Expected {iri} to have a short name (final path or hash), but found none."
        )
    return name


def short_str(term: Node) -> str:
    """Compact rendering of a term for diagnostics."""
    if isinstance(term, URIRef):
        return named_portion_or_empty(term) or str(term)
    return str(term)


def require_iri(term: Node) -> URIRef:
    if not isinstance(term, URIRef):
        raise MalformedIdentifierError(f"Expected an IRI but found {term!r}.")
    return term


def name_from_context(iri: str, context: str) -> str | None:
    """Strip a context prefix from an IRI.

    An ``https:`` context also matches IRIs under its ``http:`` counterpart.
    Returns None when neither form is a prefix of the IRI.
    """
    if iri.startswith(context):
        return re.sub(r"^[#/]", "", iri[len(context):])
    if context.startswith("https:"):
        return name_from_context(iri, "http:" + context[len("https:"):])
    return None


def sanitize_identifier(name: str) -> str:
    """Replace characters outside ``[A-Za-z0-9_]`` and avoid a leading digit."""
    name = unquote(name)
    name = _NOT_IDENTIFIER.sub("_", name)
    if re.match(r"^[0-9]", name):
        name = f"_{name}"
    return name


def derive_name(iri: str, prefixes: tuple[str, ...] = ()) -> str:
    """Derive a Python identifier from an IRI and the configured context prefixes.

    Examples
    --------
    >>> derive_name("https://example.org/Foo-Bar", ("https://example.org",))
    'Foo_Bar'
    >>> derive_name("http://example.org/3DModel", ("https://example.org",))
    '_3DModel'
    """
    local = ""
    for prefix in prefixes:
        stripped = name_from_context(str(iri), prefix)
        if stripped:
            local = re.split(r"[#/]", stripped)[-1]
            break
    if not local:
        local = named_portion(iri)
    return sanitize_identifier(local)


def attribute_name(name: str) -> str:
    """Turn a derived property name into a model attribute name.

    Keywords and names pydantic reserves get a trailing underscore; a leading
    underscore would make the field private, so such names get an ``f`` prefix.
    """
    if name.startswith("_"):
        name = f"f{name}"
    if keyword.iskeyword(name) or name in _RESERVED_ATTRIBUTES or name.startswith("model_"):
        name = f"{name}_"
    return name
