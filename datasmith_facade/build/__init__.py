# Datasmith Facade build module
# Declarative third-party module records; no module resolution happens here.

from .module_rules import (
    ModuleRules,
    ModuleRulesError,
    ModuleType,
    TargetConfiguration,
    TargetLinkType,
    TargetPlatform,
    TargetRules,
    TargetType,
    expand_path_variables,
)
from .thirdparty import THIRD_PARTY_MODULES, facade_runtime_rules, rules_for

__all__ = [
    "ModuleRules",
    "ModuleRulesError",
    "ModuleType",
    "TargetConfiguration",
    "TargetLinkType",
    "TargetPlatform",
    "TargetRules",
    "TargetType",
    "expand_path_variables",
    "THIRD_PARTY_MODULES",
    "facade_runtime_rules",
    "rules_for",
]
