"""Derive operation documents and Python types from a GraphQL schema.

The schema is parsed with ``graphql-core``. Every field of the ``Query`` and
``Mutation`` root types becomes an :class:`OperationSpec` whose document
selects all fields of the returned type, recursing into nested object and
interface types up to :data:`DEFAULT_MAX_DEPTH` levels. Unions select
``__typename``. :func:`render_module` also emits one async function per
operation plus ``query`` and ``mutation`` mappings.
"""

from __future__ import annotations

import keyword
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from graphql import (
    GraphQLError,
    GraphQLNamedType,
    GraphQLSchema,
    build_schema,
    get_named_type,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)

logger = logging.getLogger("usergql.codegen")

DEFAULT_MAX_DEPTH = 3
INDENT = "  "

_BUILTIN_SCALARS = {
    "ID": "str",
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}


class SchemaError(ValueError):
    """Raised when a schema cannot be parsed or lacks the expected shape."""


@dataclass(frozen=True)
class ArgumentSpec:
    name: str
    type: str


@dataclass(frozen=True)
class SelectionSpec:
    name: str
    children: Tuple["SelectionSpec", ...] = ()


@dataclass(frozen=True)
class OperationSpec:
    """One root field of the schema, ready to be rendered as a document."""

    name: str
    kind: str
    arguments: Tuple[ArgumentSpec, ...]
    return_type: str
    return_type_name: str
    is_list: bool
    selection: Tuple[SelectionSpec, ...]

    @property
    def constant_name(self) -> str:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", self.name).upper()


def parse_schema(sdl: str) -> GraphQLSchema:
    try:
        return build_schema(sdl)
    except (GraphQLError, TypeError) as exc:
        raise SchemaError(f"Invalid GraphQL schema: {exc}") from exc


def _has_fields(type_: GraphQLNamedType) -> bool:
    return is_object_type(type_) or is_interface_type(type_)


def _select(
    type_: GraphQLNamedType,
    depth: int,
    max_depth: int,
    exclude_fields: frozenset,
) -> Tuple[SelectionSpec, ...]:
    if is_union_type(type_):
        return (SelectionSpec("__typename"),)
    if not _has_fields(type_):
        return ()
    selections: List[SelectionSpec] = []
    for field_name, field in type_.fields.items():
        if field_name.startswith("__") or field_name in exclude_fields:
            continue
        named = get_named_type(field.type)
        if _has_fields(named) or is_union_type(named):
            if depth >= max_depth:
                continue
            selections.append(
                SelectionSpec(field_name, _select(named, depth + 1, max_depth, exclude_fields))
            )
        else:
            selections.append(SelectionSpec(field_name))
    # A composite type needs at least one selected field.
    if not selections:
        selections.append(SelectionSpec("__typename"))
    return tuple(selections)


def _is_list(type_) -> bool:
    if is_non_null_type(type_):
        type_ = type_.of_type
    return is_list_type(type_)


def load_operations(
    sdl: str,
    exclude_fields: Iterable[str] = (),
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[OperationSpec]:
    """Return an :class:`OperationSpec` for every query and mutation field."""

    schema = parse_schema(sdl)
    excluded = frozenset(exclude_fields)
    operations: List[OperationSpec] = []

    for kind, root in (("query", schema.query_type), ("mutation", schema.mutation_type)):
        if root is None:
            continue
        for field_name, field in root.fields.items():
            if field_name.startswith("__"):
                continue
            named = get_named_type(field.type)
            operations.append(
                OperationSpec(
                    name=field_name,
                    kind=kind,
                    arguments=tuple(
                        ArgumentSpec(arg_name, str(arg.type)) for arg_name, arg in field.args.items()
                    ),
                    return_type=str(field.type),
                    return_type_name=named.name,
                    is_list=_is_list(field.type),
                    selection=_select(named, 1, max_depth, excluded),
                )
            )

    if not operations:
        raise SchemaError("Schema defines no query or mutation fields")
    logger.info("Loaded %d operation(s) from schema", len(operations))
    return operations


def _render_selection(selection: Sequence[SelectionSpec], level: int) -> List[str]:
    lines: List[str] = []
    for item in selection:
        if item.children:
            lines.append(f"{INDENT * level}{item.name} {{")
            lines.extend(_render_selection(item.children, level + 1))
            lines.append(f"{INDENT * level}}}")
        else:
            lines.append(f"{INDENT * level}{item.name}")
    return lines


def render_document(operation: OperationSpec) -> str:
    """Render ``operation`` as a GraphQL document."""

    header = f"{operation.kind} {operation.name}"
    call = operation.name
    if operation.arguments:
        header += "(" + ", ".join(f"${arg.name}: {arg.type}" for arg in operation.arguments) + ")"
        call += "(" + ", ".join(f"{arg.name}: ${arg.name}" for arg in operation.arguments) + ")"

    lines = [f"{header} {{"]
    if operation.selection:
        lines.append(f"{INDENT}{call} {{")
        lines.extend(_render_selection(operation.selection, 2))
        lines.append(f"{INDENT}}}")
    else:
        lines.append(f"{INDENT}{call}")
    lines.append("}")
    return "\n".join(lines)


def python_type(graphql_type: str, custom_scalars: Iterable[str] = ()) -> str:
    """Map a GraphQL type reference such as ``[User!]!`` to a Python annotation."""

    text = graphql_type.strip()
    if text.endswith("!"):
        return _python_type_required(text[:-1], frozenset(custom_scalars))
    return f"Optional[{_python_type_required(text, frozenset(custom_scalars))}]"


def _python_type_required(text: str, custom_scalars: frozenset) -> str:
    if text.startswith("[") and text.endswith("]"):
        return f"List[{python_type(text[1:-1], custom_scalars)}]"
    if text in _BUILTIN_SCALARS:
        return _BUILTIN_SCALARS[text]
    if text in custom_scalars:
        return "Any"
    return text


def _render_fields_type(
    type_: GraphQLNamedType,
    custom_scalars: frozenset,
    excluded: frozenset,
) -> List[str]:
    fields = [
        (name, python_type(str(field.type), custom_scalars))
        for name, field in type_.fields.items()
        if name not in excluded
    ]
    if any(keyword.iskeyword(name) for name, _ in fields):
        body = ", ".join(f'"{name}": "{annotation}"' for name, annotation in fields)
        return [f'{type_.name} = TypedDict("{type_.name}", {{{body}}})']
    lines = [f"class {type_.name}(TypedDict):"]
    if not fields:
        lines.append("    pass")
    for name, annotation in fields:
        lines.append(f"    {name}: {annotation}")
    return lines


def _render_enum(type_: GraphQLNamedType) -> List[str]:
    lines = [f"class {type_.name}(str, Enum):"]
    for value_name in type_.values:
        member = f"{value_name}_" if keyword.iskeyword(value_name) else value_name
        lines.append(f'    {member} = "{value_name}"')
    if len(lines) == 1:
        lines.append("    pass")
    return lines


_RESERVED_PARAMETERS = {"client", "variables"}


def _python_name(name: str) -> str:
    if keyword.iskeyword(name) or name in _RESERVED_PARAMETERS:
        return f"{name}_"
    return name


def _render_union(type_: GraphQLNamedType) -> List[str]:
    members = ", ".join(f'"{member.name}"' for member in type_.types)
    return [f"{type_.name} = Union[{members}]"]


def _render_operation_function(
    operation: OperationSpec,
    custom_scalars: frozenset,
    raise_errors: bool,
) -> List[str]:
    method = "mutate" if operation.kind == "mutation" else "query"
    required = [arg for arg in operation.arguments if arg.type.endswith("!")]
    optional = [arg for arg in operation.arguments if not arg.type.endswith("!")]

    # Nullable arguments default to None once no required argument follows them.
    last_required = max(
        (index for index, arg in enumerate(operation.arguments) if arg.type.endswith("!")),
        default=-1,
    )
    parameters = ["client"]
    for index, arg in enumerate(operation.arguments):
        parameter = f"{_python_name(arg.name)}: {python_type(arg.type, custom_scalars)}"
        if index > last_required:
            parameter += " = None"
        parameters.append(parameter)

    if raise_errors:
        returns = python_type(operation.return_type, custom_scalars)
    else:
        returns = "Result"

    initial = ", ".join(f'"{arg.name}": {_python_name(arg.name)}' for arg in required)
    lines = [
        f"async def {_python_name(operation.name)}({', '.join(parameters)}) -> {returns}:",
        f"    variables: Dict[str, Any] = {{{initial}}}",
    ]
    for arg in optional:
        lines.append(f"    if {_python_name(arg.name)} is not None:")
        lines.append(f'        variables["{arg.name}"] = {_python_name(arg.name)}')

    call = (
        f'execute_operation(client, "{method}", "{operation.name}", '
        f"{operation.constant_name}, variables)"
    )
    if raise_errors:
        lines.append(f"    return (await {call}).unwrap()")
    else:
        lines.append(f"    return await {call}")
    return lines


def _render_namespace(name: str, operations: Sequence[OperationSpec]) -> List[str]:
    if not operations:
        return [f"{name}: Dict[str, Any] = {{}}"]
    lines = [f"{name} = {{"]
    for operation in sorted(operations, key=lambda op: op.name):
        lines.append(f'    "{operation.name}": {_python_name(operation.name)},')
    lines.append("}")
    return lines


def render_module(
    sdl: str,
    header: str = "",
    exclude_fields: Iterable[str] = (),
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    raise_errors: bool = False,
) -> str:
    """Render a Python module with types, documents and operation functions.

    Each root field becomes ``async def <field>(client, ...)``. By default the
    functions return a :data:`~usergql.results.Result`; with ``raise_errors``
    they return the field value and raise
    :class:`~usergql.results.OperationError` instead.
    """

    excluded = frozenset(exclude_fields)
    schema = parse_schema(sdl)
    operations = load_operations(sdl, excluded, max_depth=max_depth)

    custom_scalars = frozenset(
        name
        for name, type_ in schema.type_map.items()
        if is_scalar_type(type_) and name not in _BUILTIN_SCALARS
    )

    root_types = {
        root.name
        for root in (schema.query_type, schema.mutation_type, schema.subscription_type)
        if root is not None
    }

    blocks: List[List[str]] = []
    for name in sorted(schema.type_map):
        type_ = schema.type_map[name]
        if name.startswith("__") or name in root_types:
            continue
        if is_enum_type(type_):
            blocks.append(_render_enum(type_))
        elif is_union_type(type_):
            blocks.append(_render_union(type_))
        elif _has_fields(type_) or is_input_object_type(type_):
            blocks.append(_render_fields_type(type_, custom_scalars, excluded))

    ordered = sorted(operations, key=lambda op: op.name)
    for operation in ordered:
        document = render_document(operation)
        blocks.append([f'{operation.constant_name} = """{document}"""'])
    for operation in ordered:
        blocks.append(_render_operation_function(operation, custom_scalars, raise_errors))

    queries = [op for op in ordered if op.kind == "query"]
    mutations = [op for op in ordered if op.kind == "mutation"]

    # The header follows the __future__ import, which must stay first.
    lines: List[str] = [
        '"""Generated GraphQL types, documents and operations. Do not edit by hand."""',
        "",
        "from __future__ import annotations",
        "",
    ]
    if header:
        lines.extend([header.rstrip("\n"), ""])
    lines.extend(
        [
            "from enum import Enum",
            "from typing import Any, Dict, List, Optional, TypedDict, Union",
            "",
            "from usergql.facade import execute_operation",
        ]
    )
    if not raise_errors:
        lines.append("from usergql.results import Result")
    for block in blocks:
        lines.extend(["", ""])
        lines.extend(block)
    lines.extend(["", ""])
    lines.append(f"QUERY_OPERATIONS = {_render_tuple([op.name for op in queries])}")
    lines.append(f"MUTATION_OPERATIONS = {_render_tuple([op.name for op in mutations])}")
    lines.append("")
    lines.extend(_render_namespace("query", queries))
    lines.extend(_render_namespace("mutation", mutations))
    return "\n".join(lines) + "\n"


def _render_tuple(names: Sequence[str]) -> str:
    if len(names) == 1:
        return f'("{names[0]}",)'
    return "(" + ", ".join(f'"{name}"' for name in names) + ")"


__all__ = [
    "ArgumentSpec",
    "DEFAULT_MAX_DEPTH",
    "OperationSpec",
    "SchemaError",
    "SelectionSpec",
    "load_operations",
    "parse_schema",
    "python_type",
    "render_document",
    "render_module",
]
