# Third-party module records (SDL2, OpenGL, DirectShow, WeGame) and the facade runtime library.
#
# Each *_rules(target) function returns a validated ModuleRules for one target.
# Platforms a module does not support yield a record with no libraries rather than an error.

from __future__ import annotations

import os
from typing import Callable, Dict, Optional

from .module_rules import (
    ModuleRules,
    TargetConfiguration,
    TargetLinkType,
    TargetPlatform,
    TargetRules,
    TargetType,
)

SDL2_VERSION = "SDL-gui-backend"
DIRECTSHOW_VERSION = "DirectShow-1.0.0"
TENCENT_DLL_DIR = "$(ProjectDir)/Binaries/ThirdParty/Tencent/"
FACADE_LIBRARY_BASENAME = "DatasmithFacadeCSharp"


def sdl2_rules(target: TargetRules) -> ModuleRules:
    inc_path = os.path.join(target.third_party_source_dir, "SDL2", SDL2_VERSION, "include")
    lib_path = os.path.join(target.third_party_source_dir, "SDL2", SDL2_VERSION, "lib")

    rules = ModuleRules(name="SDL2")
    # SDL is assumed to be built with extensions
    rules.public_definitions.append("SDL_WITH_EPIC_EXTENSIONS=1")
    rules.public_include_paths.append(inc_path)

    if target.is_unix:
        if target.configuration is TargetConfiguration.DEBUG:
            # Debug build is -fPIC and usable in all targets
            lib_name = "libSDL2_fPIC_Debug.a"
        elif target.link_type is TargetLinkType.MONOLITHIC:
            lib_name = "libSDL2.a"
        else:
            lib_name = "libSDL2_fPIC.a"
        rules.public_additional_libraries.append(os.path.join(lib_path, "Linux", target.architecture, lib_name))
    elif target.platform is TargetPlatform.WIN64:
        rules.public_additional_libraries.append(os.path.join(lib_path, "Win64", "SDL2.lib"))
        rules.runtime_dependencies.append(
            os.path.join(target.engine_dir, "Binaries", "ThirdParty", "SDL2", "Win64", "SDL2.dll")
        )
        rules.public_delay_load_dlls.append("SDL2.dll")

    return rules.validate()


def opengl_rules(target: TargetRules, module_directory: str = "Engine/Source/ThirdParty/OpenGL") -> ModuleRules:
    rules = ModuleRules(name="OpenGL")
    rules.public_include_paths.append(module_directory)

    if target.is_windows:
        rules.public_system_libraries.append("opengl32.lib")
    elif target.platform is TargetPlatform.MAC:
        rules.public_frameworks.extend(["OpenGL", "QuartzCore"])
    elif target.platform is TargetPlatform.IOS:
        rules.public_frameworks.append("OpenGLES")

    return rules.validate()


def directshow_rules(target: TargetRules) -> ModuleRules:
    rules = ModuleRules(name="DirectShow")
    if not target.is_windows:
        return rules.validate()

    # String concatenation: third_party_source_dir carries its trailing separator
    base = target.third_party_source_dir + f"DirectShow/{DIRECTSHOW_VERSION}/"
    arch_dir = "Win32" if target.platform is TargetPlatform.WIN32 else "Win64"
    lib_path = base + f"Lib/{arch_dir}/vs{target.visual_studio_version}/"

    rules.public_system_include_paths.append(base + "src/Public")

    lib_name = "DirectShow"
    if target.configuration is TargetConfiguration.DEBUG and target.debug_builds_use_debug_crt:
        lib_name += "d"
    if target.platform is not TargetPlatform.WIN32:
        lib_name += "_64"
    lib_name += ".lib"
    rules.public_additional_libraries.append(lib_path + lib_name)

    return rules.validate()


def wegame_rules(target: TargetRules, rail_enabled: bool = True) -> ModuleRules:
    rules = ModuleRules(name="WeGame")

    valid_target = target.target_type is not TargetType.SERVER
    if not (rail_enabled and valid_target and target.is_windows):
        rules.public_definitions.append("WITH_TENCENT_RAIL_SDK=0")
        return rules.validate()

    rules.public_definitions.append("WITH_TENCENT_RAIL_SDK=1")
    rules.public_system_include_paths.append(
        os.path.join(target.third_party_source_dir, "Tencent", "WeGame", "railSDK")
    )

    dll_name = "rail_api.dll"
    if target.platform is TargetPlatform.WIN64:
        dll_name = dll_name.replace(".dll", "64.dll")

    # The DLL cannot be a dependency of the base editor, only of a project
    if target.project_file is not None:
        rules.runtime_dependencies.append(os.path.join(TENCENT_DLL_DIR, target.platform.value, dll_name))
    rules.public_delay_load_dlls.append(dll_name)

    return rules.validate()


def facade_library_filename(target_platform: TargetPlatform) -> str:
    """Platform file name of the native facade shared library."""
    if target_platform in (TargetPlatform.WIN64, TargetPlatform.WIN32):
        return f"{FACADE_LIBRARY_BASENAME}.dll"
    if target_platform in (TargetPlatform.MAC, TargetPlatform.IOS):
        return f"lib{FACADE_LIBRARY_BASENAME}.dylib"
    return f"lib{FACADE_LIBRARY_BASENAME}.so"


def facade_runtime_rules(target: TargetRules) -> ModuleRules:
    """Record for the prebuilt native facade library loaded by core.native."""
    rules = ModuleRules(name="DatasmithFacade")
    rules.public_include_paths.append(
        os.path.join(target.third_party_source_dir, "Datasmith", "DatasmithFacade", "include")
    )
    binaries = "Linux" if target.is_unix else target.platform.value
    filename = facade_library_filename(target.platform)
    rules.runtime_dependencies.append(os.path.join(target.engine_dir, "Binaries", binaries, filename))
    if target.is_windows:
        rules.public_delay_load_dlls.append(filename)
    return rules.validate()


THIRD_PARTY_MODULES: Dict[str, Callable[[TargetRules], ModuleRules]] = {
    "SDL2": sdl2_rules,
    "OpenGL": opengl_rules,
    "DirectShow": directshow_rules,
    "WeGame": wegame_rules,
    "DatasmithFacade": facade_runtime_rules,
}


def rules_for(name: str, target: Optional[TargetRules] = None) -> ModuleRules:
    """Record for a named module; raises KeyError for unknown names."""
    try:
        factory = THIRD_PARTY_MODULES[name]
    except KeyError:
        raise KeyError(f"Unknown third-party module {name!r}; known: {', '.join(sorted(THIRD_PARTY_MODULES))}") from None
    return factory(target or TargetRules.host())
