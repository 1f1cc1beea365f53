# SPDX-License-Identifier: MIT
"""Rule class registry — explicit list of all built-in rule classes.

List order is catalog registration order, which is the tie-break order for
findings that otherwise sort equal.
"""

from __future__ import annotations

from apilint.rules.base import Rule
from apilint.rules.documentation import HasCommentsRule
from apilint.rules.enums import EnumUnspecifiedRule, EnumValueCasingRule
from apilint.rules.field_behavior import BehaviorConflictRule
from apilint.rules.http_bindings import HttpAnnotationRule, HttpTemplateSyntaxRule
from apilint.rules.long_running import OperationInfoRule
from apilint.rules.naming import (
    FieldLowerSnakeRule,
    FieldReservedWordsRule,
    MessageNameCasingRule,
    ResourceNameFieldRule,
)
from apilint.rules.options import CsharpNamespaceRule
from apilint.rules.standard_methods import (
    CreateHttpBodyRule,
    DeleteResponseEmptyRule,
    GetHttpMethodRule,
    GetRequestNameRule,
    GetResponseNameRule,
    ListPaginationRule,
    ListResponseNameRule,
    UpdateMaskRule,
)

RULE_REGISTRY: list[type[Rule]] = [
    HttpAnnotationRule,
    HttpTemplateSyntaxRule,
    GetHttpMethodRule,
    GetRequestNameRule,
    GetResponseNameRule,
    ListResponseNameRule,
    ListPaginationRule,
    CreateHttpBodyRule,
    UpdateMaskRule,
    DeleteResponseEmptyRule,
    OperationInfoRule,
    ResourceNameFieldRule,
    MessageNameCasingRule,
    FieldLowerSnakeRule,
    FieldReservedWordsRule,
    EnumUnspecifiedRule,
    EnumValueCasingRule,
    BehaviorConflictRule,
    CsharpNamespaceRule,
    HasCommentsRule,
]
