"""
Fatal error types. Anything recoverable is a Diagnostic instead.
"""


class TypegenError(Exception):
    """Base class for errors that abort a generation run."""


class MalformedIdentifierError(TypegenError):
    """A term expected to be a named IRI is a literal, a blank node, or has no name."""


class UnknownIdentifierError(TypegenError):
    """An IRI was looked up in a registry that does not contain it."""


class InvalidOntologyError(TypegenError):
    """The ontology violates the basic shape the compiler relies on."""


class ConfigurationError(TypegenError):
    """Invalid generator configuration, detected before any pass runs."""
