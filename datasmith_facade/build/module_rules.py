# Declarative third-party module records
#
# A ModuleRules record states, for one build target, what an external (header/library only)
# module contributes: include paths, libraries, frameworks, definitions and runtime files.
# Records are produced per TargetRules; resolving them into a build graph is the build tool's job.
#
# Path variables such as $(EngineDir) and $(ProjectDir) are kept verbatim in records and
# substituted with expand_path_variables() by consumers that need concrete paths.

from __future__ import annotations

import logging
import platform as _platform
import re
import sys
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class ModuleRulesError(Exception):
    """Raised when a module record is malformed."""
    pass


class TargetPlatform(Enum):
    WIN64 = "Win64"
    WIN32 = "Win32"
    MAC = "Mac"
    IOS = "IOS"
    LINUX = "Linux"
    LINUX_ARM64 = "LinuxArm64"


class TargetConfiguration(Enum):
    DEBUG = "Debug"
    DEBUG_GAME = "DebugGame"
    DEVELOPMENT = "Development"
    TEST = "Test"
    SHIPPING = "Shipping"


class TargetLinkType(Enum):
    MONOLITHIC = "Monolithic"
    MODULAR = "Modular"


class TargetType(Enum):
    GAME = "Game"
    EDITOR = "Editor"
    CLIENT = "Client"
    SERVER = "Server"
    PROGRAM = "Program"


class ModuleType(Enum):
    EXTERNAL = "External"        # no compiled sources, only headers/libraries
    CPLUSPLUS = "CPlusPlus"


WINDOWS_PLATFORMS = frozenset({TargetPlatform.WIN64, TargetPlatform.WIN32})
UNIX_PLATFORMS = frozenset({TargetPlatform.LINUX, TargetPlatform.LINUX_ARM64})

_DEFINITION_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(=.*)?$")
_PATH_VAR_RE = re.compile(r"\$\((\w+)\)")


@dataclass(frozen=True)
class TargetRules:
    """Build target a module record is produced for"""
    platform: TargetPlatform
    configuration: TargetConfiguration = TargetConfiguration.DEVELOPMENT
    architecture: str = "x86_64-unknown-linux-gnu"
    link_type: TargetLinkType = TargetLinkType.MODULAR
    target_type: TargetType = TargetType.GAME
    third_party_source_dir: str = "Engine/Source/ThirdParty/"
    engine_dir: str = "$(EngineDir)"
    project_file: Optional[str] = None
    visual_studio_version: str = "2019"
    debug_builds_use_debug_crt: bool = False

    @property
    def is_windows(self) -> bool:
        return self.platform in WINDOWS_PLATFORMS

    @property
    def is_unix(self) -> bool:
        return self.platform in UNIX_PLATFORMS

    @classmethod
    def host(cls, **overrides: Any) -> "TargetRules":
        """Target describing the running interpreter's platform."""
        machine = _platform.machine().lower()
        if sys.platform.startswith("win"):
            plat = TargetPlatform.WIN64 if sys.maxsize > 2 ** 32 else TargetPlatform.WIN32
            arch = "x64"
        elif sys.platform == "darwin":
            plat = TargetPlatform.MAC
            arch = machine or "arm64"
        elif machine in ("aarch64", "arm64"):
            plat = TargetPlatform.LINUX_ARM64
            arch = "aarch64-unknown-linux-gnueabi"
        else:
            plat = TargetPlatform.LINUX
            arch = "x86_64-unknown-linux-gnu"
        target = cls(platform=plat, architecture=arch)
        return replace(target, **overrides) if overrides else target


@dataclass
class ModuleRules:
    """Declarative record for one third-party module"""
    name: str
    module_type: ModuleType = ModuleType.EXTERNAL
    public_include_paths: List[str] = field(default_factory=list)
    public_system_include_paths: List[str] = field(default_factory=list)
    public_additional_libraries: List[str] = field(default_factory=list)
    public_system_libraries: List[str] = field(default_factory=list)
    public_frameworks: List[str] = field(default_factory=list)
    public_definitions: List[str] = field(default_factory=list)
    runtime_dependencies: List[str] = field(default_factory=list)
    public_delay_load_dlls: List[str] = field(default_factory=list)

    def _list_fields(self) -> List[str]:
        return [f.name for f in fields(self) if f.name not in ("name", "module_type")]

    def validate(self) -> "ModuleRules":
        """
        Check the record shape. Returns self so records can be validated inline.
        Raises ModuleRulesError on the first problem found.
        """
        if not isinstance(self.name, str) or not self.name.strip():
            raise ModuleRulesError("Module name must be a non-empty string")
        if self.module_type is not ModuleType.EXTERNAL:
            raise ModuleRulesError(f"{self.name}: third-party modules must be External, got {self.module_type.value}")
        for list_name in self._list_fields():
            values = getattr(self, list_name)
            seen = set()
            for value in values:
                if not isinstance(value, str) or not value:
                    raise ModuleRulesError(f"{self.name}.{list_name}: empty or non-string entry {value!r}")
                if value in seen:
                    raise ModuleRulesError(f"{self.name}.{list_name}: duplicate entry {value!r}")
                seen.add(value)
        for definition in self.public_definitions:
            if not _DEFINITION_RE.match(definition):
                raise ModuleRulesError(f"{self.name}: malformed definition {definition!r}")
        return self

    def definitions_map(self) -> Dict[str, str]:
        """Definitions as NAME -> VALUE; bare names map to '1'."""
        out: Dict[str, str] = {}
        for definition in self.public_definitions:
            key, sep, value = definition.partition("=")
            out[key] = value if sep else "1"
        return out

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "module_type": self.module_type.value}
        for list_name in self._list_fields():
            out[list_name] = list(getattr(self, list_name))
        return out


def expand_path_variables(path: str, variables: Mapping[str, str]) -> str:
    """
    Substitute $(Name) variables in path. Unknown variables are left in place
    and logged, so a partially configured environment stays visible.
    """
    def _sub(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        logger.debug(f"expand_path_variables: no value for $({key}) in {path}")
        return match.group(0)

    return _PATH_VAR_RE.sub(_sub, path)
