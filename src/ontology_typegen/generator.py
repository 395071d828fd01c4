"""
Generation pipeline: triples -> topics -> model -> hierarchy -> types -> module.

Loading the ontology is the only asynchronous step; the compiler passes run
one after another on the complete triple list.
"""

from pathlib import Path
from typing import Callable, Iterable

from ontology_typegen.algebra import TypeAlgebra
from ontology_typegen.builder import build_model
from ontology_typegen.emitter import write_declarations
from ontology_typegen.hierarchy import resolve_hierarchy
from ontology_typegen.models import Diagnostics, GenerationResult, GeneratorOptions, Triple
from ontology_typegen.reader import read_triples
from ontology_typegen.topics import as_typed_topics


def compile_triples(
    triples: Iterable[Triple],
    write: Callable[[str], object],
    options: GeneratorOptions | None = None,
    diagnostics: Diagnostics | None = None,
) -> GenerationResult:
    """Compile triples into a module, pushing it to ``write``.

    Raises
    ------
    TypegenError:
        On a malformed identifier, an unknown class or a bad configuration.
        Nothing has been written in that case.
    """
    options = options or GeneratorOptions()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    options.context.validate()

    topics = as_typed_topics(triples)
    model = build_model(topics, diagnostics)
    resolve_hierarchy(model, diagnostics)
    algebra = TypeAlgebra(model, options, diagnostics)
    stats = write_declarations(model, algebra, options, write)
    return GenerationResult(stats=stats, diagnostics=diagnostics)


def compile_source(
    triples: Iterable[Triple],
    options: GeneratorOptions | None = None,
) -> tuple[str, GenerationResult]:
    """Compile triples into module source text."""
    chunks: list[str] = []
    result = compile_triples(triples, chunks.append, options)
    return "".join(chunks), result


async def generate_module(
    source: str | Path,
    options: GeneratorOptions | None = None,
    rdf_format: str | None = None,
) -> tuple[str, GenerationResult]:
    """Load an ontology from a URL or file and compile it into module source.

    Parameters
    ----------
    source:
        URL or local path of the ontology.
    options:
        Deprecation switch and naming context.
    rdf_format:
        rdflib parser name; guessed from ``source`` when omitted.
    """
    diagnostics = Diagnostics()
    triples = await read_triples(source, diagnostics, rdf_format)
    chunks: list[str] = []
    result = compile_triples(triples, chunks.append, options, diagnostics)
    return "".join(chunks), result
