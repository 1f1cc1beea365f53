# SPDX-License-Identifier: MIT
"""Pydantic models for the serialized descriptor set fed into the schema model.

The descriptor is a JSON document mirroring a protobuf ``FileDescriptorSet``
with the API annotations the rules care about (HTTP bindings, long-running
operation info, resource descriptors, field behaviors) flattened in.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

OptionValue = str | int | float | bool | list[str | int | float | bool]


class Cardinality(StrEnum):
    SINGULAR = "singular"
    OPTIONAL = "optional"
    REPEATED = "repeated"


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _Commented(_Strict):
    comments: list[str] = Field(default_factory=list)

    @field_validator("comments", mode="before")
    @classmethod
    def _split_comment_block(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.splitlines()
        return value


class _Declaration(_Commented):
    """Fields shared by every named declaration."""

    name: str = Field(min_length=1)
    line: int = Field(default=0, ge=0)
    options: dict[str, OptionValue] = Field(default_factory=dict)


class HttpRuleSpec(_Strict):
    method: str
    path: str
    body: str = ""

    @field_validator("method")
    @classmethod
    def _lower_method(cls, value: str) -> str:
        return value.lower()


class OperationInfoSpec(_Strict):
    response_type: str = ""
    metadata_type: str = ""


class ResourceSpec(_Strict):
    type: str
    patterns: list[str] = Field(default_factory=list)


class FieldSpec(_Declaration):
    number: int = Field(ge=1)
    type: str = Field(min_length=1)
    cardinality: Cardinality = Cardinality.SINGULAR
    behaviors: list[str] = Field(default_factory=list)


class EnumValueSpec(_Declaration):
    number: int


class EnumSpec(_Declaration):
    values: list[EnumValueSpec] = Field(default_factory=list)


class MessageSpec(_Declaration):
    fields: list[FieldSpec] = Field(default_factory=list)
    messages: list[MessageSpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)
    resource: ResourceSpec | None = None
    map_entry: bool = False


class MethodSpec(_Declaration):
    input_type: str = Field(min_length=1)
    output_type: str = Field(min_length=1)
    client_streaming: bool = False
    server_streaming: bool = False
    http: HttpRuleSpec | None = None
    operation_info: OperationInfoSpec | None = None


class ServiceSpec(_Declaration):
    methods: list[MethodSpec] = Field(default_factory=list)


class FileSpec(_Commented):
    """One proto file; its ``comments`` attach to the package node."""

    name: str = Field(min_length=1)
    package: str = Field(min_length=1)
    dependency: bool = False
    options: dict[str, OptionValue] = Field(default_factory=dict)
    services: list[ServiceSpec] = Field(default_factory=list)
    messages: list[MessageSpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)


class DescriptorSet(_Strict):
    """Root of the serialized descriptor input."""

    files: list[FileSpec] = Field(default_factory=list)


MessageSpec.model_rebuild()


def summarize_validation_error(exc: ValidationError) -> list[str]:
    """Extract only field paths and error type codes from a ValidationError.

    Raw input values are never echoed, so a hostile descriptor cannot smuggle
    arbitrary text into error output.
    """
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['type']}")
    return parts
