"""
Naming context: the ``@context`` the generated types are written against.

A context is either a single URL (``https://schema.org``), making names like
``Thing`` unqualified, or a list of named prefixes
(``schema:https://schema.org,rdf:http://www.w3.org/2000/01/rdf-schema``),
making names like ``schema:Thing``.
"""

from __future__ import annotations

import re
from typing import Iterable

from ontology_typegen.config import DEFAULT_CONTEXT
from ontology_typegen.errors import ConfigurationError
from ontology_typegen.utils import name_from_context

_NAMED_CONTEXT = re.compile(r"^([^:]+):((http|https):.+)$")


def insecure_counterpart(url: str) -> str | None:
    if url.startswith("https:"):
        return "http:" + url[len("https:"):]
    return None


class Context:
    def __init__(self) -> None:
        self._entries: list[tuple[str, str]] = []

    def set_url_context(self, url: str) -> None:
        if self._entries:
            raise ConfigurationError(
                "Attempting to set a default URL context, but other named contexts exist already."
            )
        self._entries.append(("", url))

    def add_named_context(self, name: str, url: str) -> None:
        self._entries.append((name, url))

    def validate(self) -> None:
        if not self._entries:
            raise ConfigurationError("Invalid empty context.")
        if len(self._entries) == 1:
            return

        seen: set[str] = set()
        for name, _ in self._entries:
            if name in seen:
                raise ConfigurationError(f"Named context {name} found twice in context.")
            if name == "":
                raise ConfigurationError("Context with multiple named contexts includes unnamed URL.")
            seen.add(name)

    @property
    def entries(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._entries)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return tuple(url for _, url in self._entries)

    @property
    def is_url_context(self) -> bool:
        return len(self._entries) == 1 and self._entries[0][0] == ""

    def scoped_name(self, iri: str) -> str:
        """Name an IRI the way a document written against this context would.

        Gives ``Foo`` for an unnamed context, ``schema:Foo`` for a named one,
        ``schema:`` for the bare prefix, and the IRI itself when no prefix matches.
        """
        iri = str(iri)
        for ctx_name, url in self._entries:
            name = name_from_context(iri, url)
            if name is not None:
                if ctx_name == "":
                    return name or iri
                return f"{ctx_name}:{name}"
        return iri

    def accepted_values(self, url: str) -> tuple[str, ...]:
        """The configured URL plus its ``http:`` counterpart, if any."""
        http = insecure_counterpart(url)
        return (url, http) if http else (url,)

    @classmethod
    def parse(cls, value: str | Iterable[str]) -> Context:
        if isinstance(value, str):
            value = value.split(",")
        key_vals = [s.strip() for s in value if s and s.strip()]

        context = cls()
        if len(key_vals) == 1:
            context.set_url_context(key_vals[0])
        else:
            for key_val in key_vals:
                match = _NAMED_CONTEXT.match(key_val)
                if not match:
                    raise ConfigurationError(f"Unknown value {key_val} in --context flag.")
                context.add_named_context(match.group(1), match.group(2))

        context.validate()
        return context

    @classmethod
    def default(cls) -> Context:
        return cls.parse(DEFAULT_CONTEXT)

    def __repr__(self) -> str:
        return f"Context({','.join(f'{n}:{u}' if n else u for n, u in self._entries)!r})"
