# SPDX-License-Identifier: MIT
"""Schema model — immutable tree of an API surface plus a path index.

Nodes are frozen dataclasses, one subclass per kind. Every node is identified
by its stable ``path``; cross-references (method request/response, field
message/enum types) are stored as resolved paths, never as embedded nodes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ValidationError

from apilint.descriptor import (
    Cardinality,
    DescriptorSet,
    EnumSpec,
    FileSpec,
    MessageSpec,
    OptionValue,
    ServiceSpec,
    summarize_validation_error,
)
from apilint.errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

SCALAR_TYPES: frozenset[str] = frozenset(
    {
        "double",
        "float",
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "fixed32",
        "fixed64",
        "sfixed32",
        "sfixed64",
        "bool",
        "string",
        "bytes",
    }
)


class NodeKind(StrEnum):
    PACKAGE = "package"
    SERVICE = "service"
    METHOD = "method"
    MESSAGE = "message"
    FIELD = "field"
    ENUM = "enum"
    ENUM_VALUE = "enum_value"
    OPTION = "option"


class TypeKind(StrEnum):
    SCALAR = "scalar"
    MESSAGE = "message"
    ENUM = "enum"


@dataclass(frozen=True, order=True)
class SourceLocation:
    """Where a node was declared."""

    file: str
    line: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file


@dataclass(frozen=True)
class HttpBinding:
    method: str  # lowercase HTTP verb
    path: str
    body: str = ""


@dataclass(frozen=True)
class OperationInfo:
    """Long-running operation annotation; types are raw, unresolved names."""

    response_type: str
    metadata_type: str


@dataclass(frozen=True)
class ResourceDescriptor:
    type: str
    patterns: tuple[str, ...] = ()


# --- Nodes ---


@dataclass(frozen=True, kw_only=True)
class SchemaNode:
    """Common attributes of every node in the schema tree."""

    kind: ClassVar[NodeKind]

    path: str
    name: str
    parent: str | None
    location: SourceLocation
    comments: tuple[str, ...] = ()
    imported: bool = False


@dataclass(frozen=True, kw_only=True)
class PackageNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.PACKAGE


@dataclass(frozen=True, kw_only=True)
class ServiceNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.SERVICE


@dataclass(frozen=True, kw_only=True)
class MethodNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.METHOD

    request_type: str
    response_type: str
    client_streaming: bool = False
    server_streaming: bool = False
    http: HttpBinding | None = None
    operation_info: OperationInfo | None = None

    @property
    def is_streaming(self) -> bool:
        return self.client_streaming or self.server_streaming


@dataclass(frozen=True, kw_only=True)
class MessageNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.MESSAGE

    resource: ResourceDescriptor | None = None
    map_entry: bool = False


@dataclass(frozen=True, kw_only=True)
class FieldNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.FIELD

    number: int
    type: str  # scalar name, or the resolved path of a message/enum
    type_kind: TypeKind
    cardinality: Cardinality = Cardinality.SINGULAR
    behaviors: tuple[str, ...] = ()

    @property
    def repeated(self) -> bool:
        return self.cardinality is Cardinality.REPEATED


@dataclass(frozen=True, kw_only=True)
class EnumNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.ENUM


@dataclass(frozen=True, kw_only=True)
class EnumValueNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.ENUM_VALUE

    number: int


@dataclass(frozen=True, kw_only=True)
class OptionNode(SchemaNode):
    kind: ClassVar[NodeKind] = NodeKind.OPTION

    value: Any = None


def option_path(owner: str, name: str) -> str:
    """Path of the option *name* declared on *owner*."""
    return f"{owner}#{name}"


# --- Model ---


class SchemaModel:
    """Read-only view over the node tree built by :func:`load`."""

    def __init__(
        self,
        nodes: Mapping[str, SchemaNode],
        children: Mapping[str, tuple[str, ...]],
        roots: tuple[str, ...],
    ) -> None:
        self._nodes: Mapping[str, SchemaNode] = MappingProxyType(dict(nodes))
        self._children: Mapping[str, tuple[str, ...]] = MappingProxyType(dict(children))
        self._roots = tuple(roots)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    @property
    def packages(self) -> tuple[PackageNode, ...]:
        return tuple(self._nodes[p] for p in self._roots)  # type: ignore[misc]

    def get(self, path: str) -> SchemaNode:
        """Return the node at *path*; raises KeyError when absent."""
        return self._nodes[path]

    def find(self, path: str) -> SchemaNode | None:
        return self._nodes.get(path)

    def children(self, path: str) -> tuple[SchemaNode, ...]:
        """Direct children of *path* in declaration order."""
        return tuple(self._nodes[c] for c in self._children.get(path, ()))

    def ancestors_of(self, path: str) -> list[SchemaNode]:
        """Ancestors of *path*, nearest first, ending at the package."""
        result: list[SchemaNode] = []
        parent = self._nodes[path].parent
        while parent is not None:
            node = self._nodes[parent]
            result.append(node)
            parent = node.parent
        return result

    def all_nodes_of_kind(self, kind: NodeKind) -> list[SchemaNode]:
        """Every node of *kind*, imported ones included, in pre-order."""
        return [n for n in self.walk(include_imported=True) if n.kind is kind]

    def walk(self, *, include_imported: bool = False) -> Iterator[SchemaNode]:
        """Deterministic pre-order traversal of the tree."""
        stack = list(reversed(self._roots))
        while stack:
            node = self._nodes[stack.pop()]
            if include_imported or not node.imported:
                yield node
            stack.extend(reversed(self._children.get(node.path, ())))

    def resolve(self, type_ref: str, scope: str | None = None) -> SchemaNode | None:
        """Resolve a message/enum reference the way protoc scopes names.

        A leading ``.`` marks a fully-qualified name. Otherwise the name is
        looked up in *scope*, then each enclosing scope, then at the root.
        """
        for candidate in _scoped_candidates(type_ref, scope):
            node = self._nodes.get(candidate)
            if node is not None and node.kind in (NodeKind.MESSAGE, NodeKind.ENUM):
                return node
        return None


def _scoped_candidates(type_ref: str, scope: str | None) -> Iterator[str]:
    if type_ref.startswith("."):
        yield type_ref[1:]
        return
    parts = scope.split(".") if scope else []
    for i in range(len(parts), -1, -1):
        yield ".".join([*parts[:i], type_ref])


# --- Loader ---


class _Builder:
    """Two-pass builder: declare every type, then create nodes with resolved refs."""

    def __init__(self, descriptor: DescriptorSet) -> None:
        self._descriptor = descriptor
        self._nodes: dict[str, SchemaNode] = {}
        self._children: dict[str, list[str]] = {}
        self._roots: list[str] = []
        self._types: dict[str, NodeKind] = {}
        self._errors: list[str] = []
        self._package_comments: dict[str, list[str]] = {}

    def build(self) -> SchemaModel:
        files = self._descriptor.files
        for f in files:
            self._declare_types(f.package, f.messages, f.enums, f.name)
            self._package_comments.setdefault(f.package, []).extend(f.comments)
        linted_packages = {f.package for f in files if not f.dependency}
        for f in files:
            self._add_file(f, imported=f.package not in linted_packages)
        if self._errors:
            raise ParseError("Invalid descriptor", self._errors)
        children = {k: tuple(v) for k, v in self._children.items()}
        return SchemaModel(self._nodes, children, tuple(self._roots))

    # Pass 1

    def _declare_types(
        self,
        scope: str,
        messages: list[MessageSpec],
        enums: list[EnumSpec],
        file: str,
    ) -> None:
        for msg in messages:
            path = f"{scope}.{msg.name}"
            self._declare(path, NodeKind.MESSAGE, file)
            self._declare_types(path, msg.messages, msg.enums, file)
        for enum in enums:
            self._declare(f"{scope}.{enum.name}", NodeKind.ENUM, file)

    def _declare(self, path: str, kind: NodeKind, file: str) -> None:
        if path in self._types:
            self._errors.append(f"{file}: duplicate type {path}")
            return
        self._types[path] = kind

    # Pass 2

    def _add(self, node: SchemaNode) -> None:
        if node.path in self._nodes:
            self._errors.append(f"{node.location.file}: duplicate declaration {node.path}")
            return
        self._nodes[node.path] = node
        if node.parent is None:
            self._roots.append(node.path)
        else:
            self._children.setdefault(node.parent, []).append(node.path)

    def _check_name(self, name: str, file: str) -> bool:
        if "." in name or "#" in name:
            self._errors.append(f"{file}: invalid identifier {name!r}")
            return False
        return True

    def _resolve(self, type_ref: str, scope: str) -> str | None:
        for candidate in _scoped_candidates(type_ref, scope):
            if candidate in self._types:
                return candidate
        return None

    def _add_options(
        self,
        owner: str,
        options: Mapping[str, OptionValue],
        location: SourceLocation,
        imported: bool,
    ) -> None:
        for name, value in options.items():
            self._add(
                OptionNode(
                    path=option_path(owner, name),
                    name=name,
                    parent=owner,
                    location=location,
                    imported=imported,
                    value=tuple(value) if isinstance(value, list) else value,
                )
            )

    def _add_file(self, f: FileSpec, *, imported: bool) -> None:
        package = f.package
        if package not in self._nodes:
            self._add(
                PackageNode(
                    path=package,
                    name=package.rsplit(".", 1)[-1],
                    parent=None,
                    location=SourceLocation(f.name),
                    comments=tuple(self._package_comments.get(package, ())),
                    imported=imported,
                )
            )
        elif not isinstance(self._nodes[package], PackageNode):
            self._errors.append(f"{f.name}: package {package} collides with a declaration")
            return

        for name, value in f.options.items():
            existing = self._nodes.get(option_path(package, name))
            normalized = tuple(value) if isinstance(value, list) else value
            if isinstance(existing, OptionNode):
                if existing.value != normalized:
                    self._errors.append(
                        f"{f.name}: conflicting file option {name} in package {package}"
                    )
                continue
            self._add_options(package, {name: value}, SourceLocation(f.name), f.dependency)

        for service in f.services:
            self._add_service(package, service, f.name, f.dependency)
        for msg in f.messages:
            self._add_message(package, package, msg, f.name, f.dependency)
        for enum in f.enums:
            self._add_enum(package, enum, f.name, f.dependency)

    def _add_service(self, package: str, spec: ServiceSpec, file: str, imported: bool) -> None:
        if not self._check_name(spec.name, file):
            return
        path = f"{package}.{spec.name}"
        loc = SourceLocation(file, spec.line)
        self._add(
            ServiceNode(
                path=path,
                name=spec.name,
                parent=package,
                location=loc,
                comments=tuple(spec.comments),
                imported=imported,
            )
        )
        self._add_options(path, spec.options, loc, imported)

        for m in spec.methods:
            if not self._check_name(m.name, file):
                continue
            method_path = f"{path}.{m.name}"
            request = self._resolve(m.input_type, package)
            response = self._resolve(m.output_type, package)
            if request is None or self._types[request] is not NodeKind.MESSAGE:
                self._errors.append(
                    f"{file}: {method_path} request type {m.input_type} does not resolve to a message"
                )
                continue
            if response is None or self._types[response] is not NodeKind.MESSAGE:
                self._errors.append(
                    f"{file}: {method_path} response type {m.output_type} does not resolve to a message"
                )
                continue
            method_loc = SourceLocation(file, m.line)
            self._add(
                MethodNode(
                    path=method_path,
                    name=m.name,
                    parent=path,
                    location=method_loc,
                    comments=tuple(m.comments),
                    imported=imported,
                    request_type=request,
                    response_type=response,
                    client_streaming=m.client_streaming,
                    server_streaming=m.server_streaming,
                    http=(
                        HttpBinding(method=m.http.method, path=m.http.path, body=m.http.body)
                        if m.http is not None
                        else None
                    ),
                    operation_info=(
                        OperationInfo(
                            response_type=m.operation_info.response_type,
                            metadata_type=m.operation_info.metadata_type,
                        )
                        if m.operation_info is not None
                        else None
                    ),
                )
            )
            self._add_options(method_path, m.options, method_loc, imported)

    def _add_message(
        self, package: str, parent: str, spec: MessageSpec, file: str, imported: bool
    ) -> None:
        if not self._check_name(spec.name, file):
            return
        path = f"{parent}.{spec.name}"
        loc = SourceLocation(file, spec.line)
        self._add(
            MessageNode(
                path=path,
                name=spec.name,
                parent=parent,
                location=loc,
                comments=tuple(spec.comments),
                imported=imported,
                resource=(
                    ResourceDescriptor(type=spec.resource.type, patterns=tuple(spec.resource.patterns))
                    if spec.resource is not None
                    else None
                ),
                map_entry=spec.map_entry,
            )
        )
        self._add_options(path, spec.options, loc, imported)

        for fld in spec.fields:
            if not self._check_name(fld.name, file):
                continue
            field_path = f"{path}.{fld.name}"
            if fld.type in SCALAR_TYPES:
                type_name, type_kind = fld.type, TypeKind.SCALAR
            else:
                resolved = self._resolve(fld.type, path)
                if resolved is None:
                    self._errors.append(
                        f"{file}: {field_path} type {fld.type} does not resolve"
                    )
                    continue
                type_name = resolved
                type_kind = (
                    TypeKind.MESSAGE
                    if self._types[resolved] is NodeKind.MESSAGE
                    else TypeKind.ENUM
                )
            field_loc = SourceLocation(file, fld.line)
            self._add(
                FieldNode(
                    path=field_path,
                    name=fld.name,
                    parent=path,
                    location=field_loc,
                    comments=tuple(fld.comments),
                    imported=imported,
                    number=fld.number,
                    type=type_name,
                    type_kind=type_kind,
                    cardinality=fld.cardinality,
                    behaviors=tuple(fld.behaviors),
                )
            )
            self._add_options(field_path, fld.options, field_loc, imported)

        for nested in spec.messages:
            self._add_message(package, path, nested, file, imported)
        for enum in spec.enums:
            self._add_enum(path, enum, file, imported)

    def _add_enum(self, parent: str, spec: EnumSpec, file: str, imported: bool) -> None:
        if not self._check_name(spec.name, file):
            return
        path = f"{parent}.{spec.name}"
        loc = SourceLocation(file, spec.line)
        self._add(
            EnumNode(
                path=path,
                name=spec.name,
                parent=parent,
                location=loc,
                comments=tuple(spec.comments),
                imported=imported,
            )
        )
        self._add_options(path, spec.options, loc, imported)
        for value in spec.values:
            if not self._check_name(value.name, file):
                continue
            value_path = f"{path}.{value.name}"
            value_loc = SourceLocation(file, value.line)
            self._add(
                EnumValueNode(
                    path=value_path,
                    name=value.name,
                    parent=path,
                    location=value_loc,
                    comments=tuple(value.comments),
                    imported=imported,
                    number=value.number,
                )
            )
            self._add_options(value_path, value.options, value_loc, imported)


def load(data: bytes | str) -> SchemaModel:
    """Build a SchemaModel from a serialized descriptor set.

    Raises:
        ParseError: If the input is not valid JSON, violates the descriptor
            schema, declares a path twice, or has an unresolvable type reference.
    """
    try:
        descriptor = DescriptorSet.model_validate_json(data)
    except ValidationError as exc:
        raise ParseError("Malformed descriptor", summarize_validation_error(exc)) from exc
    model = _Builder(descriptor).build()
    log.debug(
        "Loaded schema model: %d files, %d nodes", len(descriptor.files), len(model)
    )
    return model


def load_file(path: Path | str) -> SchemaModel:
    """Read and load a descriptor file; unreadable files are a ParseError."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        msg = f"Cannot read descriptor {path}: {exc.strerror or exc}"
        raise ParseError(msg) from exc
    return load(data)
