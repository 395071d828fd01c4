"""
Emitter: render the resolved model as a module of pydantic models.

For every node class ``X`` the module declares

* ``XBase``, a model holding the fields of the properties declared on ``X``,
  inheriting from the ``Base`` models of its nearest emitted super-classes;
* ``XLeaf(XBase)``, which adds the ``@type`` discriminant;
* ``type X = Union[...]``, the total type used wherever ``X`` is referenced:
  enum literals, the leaf, every sub-class, and any typedefs.

Base models are written in a topological order so each class statement can
name its bases. Every other reference is resolved lazily: ``type`` aliases
evaluate on first use and the ``model_rebuild()`` loop at the end of the
module completes the models.
"""

from __future__ import annotations

import heapq
import json
import keyword
from typing import Callable

from rdflib.term import URIRef

from ontology_typegen.algebra import (
    Builtin,
    ClassRef,
    EnumLiterals,
    LeafRef,
    ListOf,
    QualifiedRef,
    TypeAlgebra,
    TypeExpr,
    TypeUnion,
    sort_key,
)
from ontology_typegen.builder import ClassRecord, OntologyModel, PropertyRecord
from ontology_typegen.config import NUMBER_STRING_PATTERN
from ontology_typegen.errors import ConfigurationError
from ontology_typegen.hierarchy import direct_bases
from ontology_typegen.models import DiagnosticKind, GeneratorOptions
from ontology_typegen.utils import attribute_name, sanitize_identifier

INDENT = "    "

# Module-level names of the generated module that a class must not take.
HELPER_NAMES = frozenset(
    {
        "NumberString",
        "IdReference",
        "NodeBase",
        "ContextValue",
        "JsonLdContext",
        "WithContext",
        "Graph",
        "GraphNode",
        "WithActionConstraints",
        # imports
        "annotations",
        "functools",
        "re",
        "Annotated",
        "Any",
        "Generic",
        "Literal",
        "TypeVar",
        "Union",
        "AfterValidator",
        "BaseModel",
        "ConfigDict",
        "Field",
        "PrivateAttr",
        "StrictBool",
        "StrictFloat",
        "StringConstraints",
        "TypeAdapter",
        "ValidatorFunctionWrapHandler",
        "WrapValidator",
        # builtins used by the module
        "dict",
        "getattr",
        "globals",
        "isinstance",
        "issubclass",
        "list",
        "str",
        "type",
        "ValueError",
    }
)

_HEADER = '''\
"""
Pydantic models for the vocabulary at {context}.

Generated by ontology-typegen. Do not edit.
"""

from __future__ import annotations

import functools
import re
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StrictBool,
    StrictFloat,
    StringConstraints,
    TypeAdapter,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)

NumberString = Annotated[str, StringConstraints(pattern=r"{pattern}")]
'''

_MODEL_CONFIG = 'model_config = ConfigDict(populate_by_name=True, extra="forbid")'

_ID_REFERENCE = f'''

class IdReference(BaseModel):
    """A node given by its identifier alone."""

    {_MODEL_CONFIG}

    at_id: str = Field(alias="@id")
'''

_WITH_CONTEXT = '''

def _require_context(node: Any) -> Any:
    if not isinstance(node, NodeBase) or node.at_context is None:
        raise ValueError('a top-level node must declare "@context"')
    return node


type WithContext[T] = Annotated[T, AfterValidator(_require_context)]
'''

_GRAPH = f'''

GraphNode = TypeVar("GraphNode")


class Graph(BaseModel, Generic[GraphNode]):
    """A document holding several top-level nodes under one "@context"."""

    {_MODEL_CONFIG}

    at_context: ContextValue = Field(alias="@context")
    at_graph: list[GraphNode] = Field(alias="@graph")
'''

_ACTION_CONSTRAINTS = '''

_CONSTRAINT_KEY = re.compile(r"^(.+)-(input|output)$")


@functools.cache
def _constraint_adapter() -> TypeAdapter[Any]:
    return TypeAdapter({specification})


def _check_action_constraints(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    if not isinstance(value, dict):
        return handler(value)
    constraints = {{k: v for k, v in value.items() if _CONSTRAINT_KEY.match(k)}}
    node = handler({{k: v for k, v in value.items() if k not in constraints}})
    if not constraints:
        return node
    if not isinstance(node, {action_base}):
        raise ValueError("input and output constraints are only allowed on actions")
    fields = {{f.alias or name for name, f in type(node).model_fields.items()}}
    for key, constraint in constraints.items():
        stem = _CONSTRAINT_KEY.match(key).group(1)
        if stem not in fields:
            raise ValueError(f"{{key!r}} does not constrain a property of {{type(node).__name__}}")
        node._action_constraints[key] = _constraint_adapter().validate_python(constraint)
    return node


type WithActionConstraints[T] = Annotated[T, WrapValidator(_check_action_constraints)]
'''

_REBUILD = '''

for _model in list(globals().values()):
    if isinstance(_model, type) and issubclass(_model, BaseModel) and _model.__module__ == __name__:
        _model.model_rebuild()
del _model
'''


def quote(text: str) -> str:
    """A double-quoted Python string literal."""
    return json.dumps(text, ensure_ascii=False)


def docstring(text: str, indent: str = INDENT) -> list[str]:
    text = text.replace("\\", "\\\\").replace('"', '\\"').replace("\r", "")
    lines = [line.rstrip() for line in text.strip().splitlines()] or [""]
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    body = [f"{indent}{line}" if line else "" for line in lines[1:]]
    return [f'{indent}"""{lines[0]}', *body, f'{indent}"""']


def comment_lines(text: str) -> list[str]:
    return [f"# {line.rstrip()}".rstrip() for line in text.strip().splitlines()]


class Emitter:
    """Renders one module for a resolved model.

    Parameters
    ----------
    model:
        Registries after hierarchy resolution.
    algebra:
        Type algebra over the same model; the emitter may exclude classes from
        it when their names collide.
    options:
        Generator options; only the context and deprecation switch matter.
    """

    def __init__(self, model: OntologyModel, algebra: TypeAlgebra, options: GeneratorOptions) -> None:
        self.model = model
        self.algebra = algebra
        self.options = options
        self.diagnostics = algebra.diagnostics
        self.context = options.context

        self.names: dict[URIRef, str] = {}
        self.attributes: dict[URIRef, str] = {}
        self.wrappers: dict[URIRef, str] = {}
        self._taken: dict[str, URIRef] = {}

        self.bases: dict[URIRef, list[ClassRecord]] = {}
        self.fields: dict[URIRef, list[PropertyRecord]] = {}
        self.order: dict[URIRef, int] = {}
        self._rendered: set[URIRef] = set()
        self.stats = {"classes": 0, "properties": 0, "enum_members": 0, "declarations": 0}

    # -- Naming ---------------------------------------------------------------

    def _assign_class_names(self) -> None:
        prefixes = self.context.prefixes
        for record in self.algebra.emitted_classes():
            name = record.display_name(prefixes)
            if keyword.iskeyword(name):
                name = f"{name}_"
            derived = (name, f"{name}Base", f"{name}Leaf")
            helper = next((n for n in derived if n in HELPER_NAMES), None)
            if helper is not None:
                raise ConfigurationError(
                    f"Class {record.subject} would declare {helper}, which the generated module reserves."
                )
            clash = next((self._taken[n] for n in derived if n in self._taken), None)
            if clash is not None:
                self.diagnostics.report(
                    DiagnosticKind.NAME_COLLISION,
                    record.subject,
                    f"Class {record.subject} is named {name}, like {clash}; skipping it.",
                )
                self.algebra.exclude(record)
                continue
            for n in derived:
                self._taken[n] = record.subject
            self.names[record.subject] = name

    def _assign_attribute_names(self) -> None:
        prefixes = self.context.prefixes
        used: dict[str, URIRef] = {}
        for prop in sorted(self.model.properties.values(), key=lambda p: sort_key(p.subject)):
            base = attribute_name(prop.display_name(prefixes))
            attr, n = base, 2
            while attr in used:
                attr, n = f"{base}_{n}", n + 1
            if attr != base:
                self.diagnostics.report(
                    DiagnosticKind.NAME_COLLISION,
                    prop.subject,
                    f"Property {prop.subject} is named {base}, like {used[base]}; using {attr}.",
                )
            used[attr] = prop.subject
            self.attributes[prop.subject] = attr

    def wrapper_name(self, prop: PropertyRecord) -> str:
        name = self.wrappers.get(prop.subject)
        if name is None:
            name = sanitize_identifier(f"Role_{self.attributes[prop.subject]}")
            while name in self._taken or name in HELPER_NAMES:
                name = f"{name}_"
            self._taken[name] = prop.subject
            self.wrappers[prop.subject] = name
        return name

    def alias(self, iri: URIRef) -> str:
        """The JSON key or ``@type`` value for an IRI under the context."""
        return self.context.scoped_name(iri)

    # -- Structure --------------------------------------------------------------

    def _resolve_bases(self, record: ClassRecord) -> tuple[list[ClassRecord], set[URIRef]]:
        """Nearest emitted node-type ancestors, and properties of skipped ones.

        A parent that is not emitted (deprecated, renamed away, or not a node
        type) is replaced by its own parents, and its properties are folded
        into the child.
        """
        classes = self.model.classes
        bases: list[ClassRecord] = []
        folded: set[URIRef] = set()
        pending = list(direct_bases(record, classes))
        seen: set[URIRef] = set()
        while pending:
            iri = pending.pop(0)
            if iri in seen:
                continue
            seen.add(iri)
            parent = classes[iri]
            if self.algebra.is_emitted(parent) and self.algebra.is_node_type(parent):
                bases.append(parent)
            else:
                folded |= parent.properties
                pending.extend(direct_bases(parent, classes))
        bases = [b for b in bases if not any(b.subject in other.ancestors for other in bases)]
        return bases, folded

    def _topological_order(self, records: list[ClassRecord]) -> list[ClassRecord]:
        """Kahn's algorithm over base edges; ties broken by name, then IRI."""
        by_iri = {r.subject: r for r in records}
        waiting = {r.subject: len(self.bases.get(r.subject, ())) for r in records}
        dependents: dict[URIRef, list[URIRef]] = {iri: [] for iri in by_iri}
        for iri, bases in self.bases.items():
            for base in bases:
                dependents[base.subject].append(iri)

        ready = [(sort_key(iri), iri) for iri, count in waiting.items() if count == 0]
        heapq.heapify(ready)
        ordered: list[ClassRecord] = []
        while ready:
            _, iri = heapq.heappop(ready)
            ordered.append(by_iri[iri])
            for dependent in dependents[iri]:
                waiting[dependent] -= 1
                if waiting[dependent] == 0:
                    heapq.heappush(ready, (sort_key(dependent), dependent))
        return ordered

    def _prepare(self) -> list[ClassRecord]:
        self._assign_class_names()
        self._assign_attribute_names()

        emitted = self.algebra.emitted_classes()
        for record in emitted:
            if not self.algebra.is_node_type(record):
                continue
            bases, folded = self._resolve_bases(record)
            self.bases[record.subject] = bases
            self.fields[record.subject] = self.algebra.emitted_properties(record.properties | folded)

        ordered = self._topological_order(emitted)
        self.order = {r.subject: i for i, r in enumerate(ordered)}
        for bases in self.bases.values():
            bases.sort(key=lambda b: self.order[b.subject])
        return ordered

    # -- Annotations ------------------------------------------------------------

    def annotation(self, expr: TypeExpr) -> str:
        if isinstance(expr, Builtin):
            return expr.annotation
        if isinstance(expr, ClassRef):
            return self.names[expr.iri]
        if isinstance(expr, LeafRef):
            return f"{self.names[expr.iri]}Leaf"
        if isinstance(expr, QualifiedRef):
            return self.wrapper_name(self.model.properties[expr.prop])
        if isinstance(expr, EnumLiterals):
            return f"Literal[{', '.join(quote(v) for v in expr.values)}]"
        if isinstance(expr, ListOf):
            return f"list[{self.union(expr.item)}]"
        raise TypeError(f"Unexpected type expression {expr!r}")

    def union(self, union: TypeUnion, optional: bool = False) -> str:
        parts = [self.annotation(m) for m in union.members]
        if optional:
            parts.append("None")
        if len(parts) == 1:
            return parts[0]
        return f"Union[{', '.join(parts)}]"

    # -- Declarations -------------------------------------------------------------

    def _deprecation(self, superseded_by: list[URIRef]) -> str:
        return "Superseded by " + ", ".join(self.alias(i) for i in superseded_by) + "."

    def _class_doc(self, record: ClassRecord) -> str | None:
        paragraphs = [record.comment] if record.comment else []
        if record.deprecated:
            paragraphs.append("Deprecated: " + self._deprecation(record.superseded_by))
        deprecated_values = [
            self.alias(m.subject) for m in self.algebra.visible_enum_members(record) if m.deprecated
        ]
        if deprecated_values:
            paragraphs.append("Deprecated values: " + ", ".join(deprecated_values) + ".")
        return "\n\n".join(paragraphs) if paragraphs else None

    def _field(self, prop: PropertyRecord) -> str:
        args = ["default=None", f"alias={quote(self.alias(prop.subject))}"]
        if prop.comment:
            args.append(f"description={quote(prop.comment)}")
        if prop.deprecated:
            args.append(f"deprecated={quote(self._deprecation(prop.superseded_by))}")
        annotation = self.union(self.algebra.field_type(prop), optional=True)
        return f"{INDENT}{self.attributes[prop.subject]}: {annotation} = Field({', '.join(args)})"

    def _declare(self, text: str) -> str:
        self.stats["declarations"] += 1
        return text

    def render_class(self, record: ClassRecord) -> str:
        name = self.names[record.subject]
        doc = self._class_doc(record)
        lines: list[str] = []

        if self.algebra.is_node_type(record):
            bases = ", ".join(f"{self.names[b.subject]}Base" for b in self.bases[record.subject]) or "NodeBase"
            fields = self.fields[record.subject]
            lines.append(f"\n\nclass {name}Base({bases}):")
            if doc:
                lines.extend(docstring(doc))
            if doc and fields:
                lines.append("")
            lines.extend(self._field(p) for p in fields)
            if not doc and not fields:
                lines.append(f"{INDENT}pass")
            self._rendered.update(p.subject for p in fields)
            self.stats["properties"] = len(self._rendered)

            lines.append(f"\n\nclass {name}Leaf({name}Base):")
            lines.append(f"{INDENT}at_type: Literal[{quote(self.alias(record.subject))}] = Field(alias=\"@type\")")
            lines.append("\n")
            self.stats["declarations"] += 2
        else:
            lines.append("\n")
            if doc:
                lines.extend(comment_lines(doc))

        lines.append(f"type {name} = {self.union(self.algebra.class_total_type(record))}")
        self.stats["classes"] += 1
        self.stats["enum_members"] += len(self.algebra.visible_enum_members(record))
        return self._declare("\n".join(lines) + "\n")

    def render_wrapper(self, prop: PropertyRecord, family: list[ClassRecord]) -> str:
        """A role wrapper carrying the property's unqualified value."""
        bases = [c for c in family if not any(c.subject in other.ancestors for other in family)]
        bases.sort(key=lambda c: self.order[c.subject])
        role_types = ", ".join(quote(self.alias(c.subject)) for c in family)
        scalar = self.algebra.scalar_type(prop)
        annotation = self.union(TypeUnion.of([*scalar.members, ListOf(scalar)]))
        lines = [
            f"\n\nclass {self.wrapper_name(prop)}({', '.join(f'{self.names[b.subject]}Base' for b in bases)}):",
            *docstring(f"A {quote(self.alias(prop.subject))} value qualified by a role."),
            "",
            f"{INDENT}at_type: Literal[{role_types}] = Field(alias=\"@type\")",
            f"{INDENT}{self.attributes[prop.subject]}: {annotation} = Field(alias={quote(self.alias(prop.subject))})",
        ]
        return self._declare("\n".join(lines) + "\n")

    def render_context(self) -> str:
        if self.context.is_url_context:
            values = self.context.accepted_values(self.context.prefixes[0])
            return self._declare(f"\nContextValue = Literal[{', '.join(quote(v) for v in values)}]\n")

        lines = [
            "\n\nclass JsonLdContext(BaseModel):",
            *docstring('The named prefixes a document\'s "@context" declares.'),
            "",
            f"{INDENT}{_MODEL_CONFIG}",
            "",
        ]
        for name, url in self.context.entries:
            values = ", ".join(quote(v) for v in self.context.accepted_values(url))
            lines.append(f"{INDENT}{attribute_name(sanitize_identifier(name))}: Literal[{values}] = Field(alias={quote(name)})")
        lines.append("\n\nContextValue = JsonLdContext")
        self.stats["declarations"] += 1
        return self._declare("\n".join(lines) + "\n")

    def render_node_base(self, with_actions: bool) -> str:
        lines = [
            "\n\nclass NodeBase(BaseModel):",
            *docstring("Keywords every node may carry."),
            "",
            f"{INDENT}{_MODEL_CONFIG}",
            "",
            f'{INDENT}at_id: Union[str, None] = Field(default=None, alias="@id")',
            f'{INDENT}at_context: Union[ContextValue, None] = Field(default=None, alias="@context")',
        ]
        if with_actions:
            lines.append(f"{INDENT}_action_constraints: dict[str, Any] = PrivateAttr(default_factory=dict)")
        return self._declare("\n".join(lines) + "\n")

    def render(self) -> list[str]:
        """Render every chunk of the module, in output order."""
        ordered = self._prepare()
        action = self.algebra.action_class()

        chunks = [
            _HEADER.format(context=self.context.prefixes[0], pattern=NUMBER_STRING_PATTERN),
            self.render_context(),
            self._declare(_ID_REFERENCE),
            self.render_node_base(with_actions=action is not None),
        ]
        chunks.extend(self.render_class(record) for record in ordered)

        if self.algebra.has_role:
            family = self.algebra.role_family()
            family.sort(key=lambda c: self.order[c.subject])
            # Wrappers exist for every property rendered as a field above.
            for prop in sorted(
                (self.model.properties[p] for p in self.wrappers), key=lambda p: sort_key(p.subject)
            ):
                chunks.append(self.render_wrapper(prop, family))

        chunks.append(self._declare(_WITH_CONTEXT))
        chunks.append(self._declare(_GRAPH))
        if action is not None:
            chunks.append(
                self._declare(
                    _ACTION_CONSTRAINTS.format(
                        specification=self.union(self.algebra.action_specification_type()),
                        action_base=f"{self.names[action.subject]}Base",
                    )
                )
            )
        chunks.append(_REBUILD)
        return chunks


def write_declarations(
    model: OntologyModel,
    algebra: TypeAlgebra,
    options: GeneratorOptions,
    write: Callable[[str], object],
) -> dict[str, int]:
    """Render the whole module, then push it to ``write`` chunk by chunk.

    Nothing is written if rendering fails.

    Returns
    -------
    dict:
        Counts of emitted classes, fields, enum members and declarations.
    """
    emitter = Emitter(model, algebra, options)
    chunks = emitter.render()
    for chunk in chunks:
        write(chunk)
    return emitter.stats
