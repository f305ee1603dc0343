import os

import pytest

from datasmith_facade.build.module_rules import (
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
from datasmith_facade.build.thirdparty import (
    THIRD_PARTY_MODULES,
    directshow_rules,
    facade_library_filename,
    facade_runtime_rules,
    opengl_rules,
    rules_for,
    sdl2_rules,
    wegame_rules,
)

TP = "Engine/Source/ThirdParty/"
SDL_LIB = os.path.join(TP, "SDL2", "SDL-gui-backend", "lib")


def _target(platform, **kw):
    return TargetRules(platform=platform, **kw)


# -------------------------
# SDL2
# -------------------------

@pytest.mark.parametrize(
    "configuration, link_type, expected",
    [
        (TargetConfiguration.DEBUG, TargetLinkType.MONOLITHIC, "libSDL2_fPIC_Debug.a"),
        (TargetConfiguration.DEVELOPMENT, TargetLinkType.MONOLITHIC, "libSDL2.a"),
        (TargetConfiguration.SHIPPING, TargetLinkType.MODULAR, "libSDL2_fPIC.a"),
    ],
)
def test_sdl2_unix_library_selection(configuration, link_type, expected):
    rules = sdl2_rules(_target(TargetPlatform.LINUX, configuration=configuration, link_type=link_type))
    assert rules.public_additional_libraries == [
        os.path.join(SDL_LIB, "Linux", "x86_64-unknown-linux-gnu", expected)
    ]
    assert rules.definitions_map() == {"SDL_WITH_EPIC_EXTENSIONS": "1"}
    assert rules.runtime_dependencies == []


def test_sdl2_win64_runtime_and_delay_load():
    rules = sdl2_rules(_target(TargetPlatform.WIN64))
    assert rules.public_additional_libraries == [os.path.join(SDL_LIB, "Win64", "SDL2.lib")]
    assert rules.runtime_dependencies == [
        os.path.join("$(EngineDir)", "Binaries", "ThirdParty", "SDL2", "Win64", "SDL2.dll")
    ]
    assert rules.public_delay_load_dlls == ["SDL2.dll"]


def test_sdl2_mac_has_headers_only():
    rules = sdl2_rules(_target(TargetPlatform.MAC))
    assert rules.public_additional_libraries == []
    assert rules.public_include_paths == [os.path.join(TP, "SDL2", "SDL-gui-backend", "include")]


# -------------------------
# OpenGL
# -------------------------

def test_opengl_per_platform():
    assert opengl_rules(_target(TargetPlatform.WIN32)).public_system_libraries == ["opengl32.lib"]
    assert opengl_rules(_target(TargetPlatform.MAC)).public_frameworks == ["OpenGL", "QuartzCore"]
    assert opengl_rules(_target(TargetPlatform.IOS)).public_frameworks == ["OpenGLES"]
    linux = opengl_rules(_target(TargetPlatform.LINUX))
    assert linux.public_system_libraries == []
    assert linux.public_frameworks == []


# -------------------------
# DirectShow
# -------------------------

def test_directshow_win64_development():
    rules = directshow_rules(_target(TargetPlatform.WIN64))
    assert rules.public_system_include_paths == [TP + "DirectShow/DirectShow-1.0.0/src/Public"]
    assert rules.public_additional_libraries == [
        TP + "DirectShow/DirectShow-1.0.0/Lib/Win64/vs2019/DirectShow_64.lib"
    ]


def test_directshow_win32_debug_crt():
    rules = directshow_rules(
        _target(
            TargetPlatform.WIN32,
            configuration=TargetConfiguration.DEBUG,
            debug_builds_use_debug_crt=True,
            visual_studio_version="2017",
        )
    )
    assert rules.public_additional_libraries == [
        TP + "DirectShow/DirectShow-1.0.0/Lib/Win32/vs2017/DirectShowd.lib"
    ]


def test_directshow_debug_without_debug_crt_uses_release_lib():
    rules = directshow_rules(_target(TargetPlatform.WIN64, configuration=TargetConfiguration.DEBUG))
    assert rules.public_additional_libraries[0].endswith("DirectShow_64.lib")


def test_directshow_non_windows_is_empty():
    rules = directshow_rules(_target(TargetPlatform.LINUX))
    assert rules.public_additional_libraries == []
    assert rules.public_system_include_paths == []


# -------------------------
# WeGame
# -------------------------

def test_wegame_win64_project_target():
    rules = wegame_rules(_target(TargetPlatform.WIN64, project_file="MyGame.uproject"))
    assert rules.definitions_map() == {"WITH_TENCENT_RAIL_SDK": "1"}
    assert rules.public_system_include_paths == [os.path.join(TP, "Tencent", "WeGame", "railSDK")]
    assert rules.runtime_dependencies == [
        os.path.join("$(ProjectDir)/Binaries/ThirdParty/Tencent/", "Win64", "rail_api64.dll")
    ]
    assert rules.public_delay_load_dlls == ["rail_api64.dll"]


def test_wegame_win32_without_project_only_delay_loads():
    rules = wegame_rules(_target(TargetPlatform.WIN32))
    assert rules.runtime_dependencies == []
    assert rules.public_delay_load_dlls == ["rail_api.dll"]


@pytest.mark.parametrize(
    "target, enabled",
    [
        (TargetRules(platform=TargetPlatform.WIN64, target_type=TargetType.SERVER), True),
        (TargetRules(platform=TargetPlatform.LINUX), True),
        (TargetRules(platform=TargetPlatform.WIN64), False),
    ],
)
def test_wegame_disabled_cases(target, enabled):
    rules = wegame_rules(target, rail_enabled=enabled)
    assert rules.public_definitions == ["WITH_TENCENT_RAIL_SDK=0"]
    assert rules.public_delay_load_dlls == []


# -------------------------
# Facade runtime
# -------------------------

@pytest.mark.parametrize(
    "platform, binaries, filename",
    [
        (TargetPlatform.WIN64, "Win64", "DatasmithFacadeCSharp.dll"),
        (TargetPlatform.MAC, "Mac", "libDatasmithFacadeCSharp.dylib"),
        (TargetPlatform.LINUX_ARM64, "Linux", "libDatasmithFacadeCSharp.so"),
    ],
)
def test_facade_runtime_location(platform, binaries, filename):
    assert facade_library_filename(platform) == filename
    rules = facade_runtime_rules(_target(platform))
    assert rules.runtime_dependencies == [os.path.join("$(EngineDir)", "Binaries", binaries, filename)]
    assert (rules.public_delay_load_dlls == [filename]) == (platform is TargetPlatform.WIN64)


# -------------------------
# Registry and record validation
# -------------------------

def test_every_registered_module_builds_valid_records():
    for platform in TargetPlatform:
        for name in THIRD_PARTY_MODULES:
            rules = rules_for(name, _target(platform))
            assert rules.name == name
            assert rules.module_type is ModuleType.EXTERNAL


def test_rules_for_unknown_module():
    with pytest.raises(KeyError):
        rules_for("PhysX", _target(TargetPlatform.LINUX))


@pytest.mark.parametrize(
    "record",
    [
        ModuleRules(name=""),
        ModuleRules(name="X", module_type=ModuleType.CPLUSPLUS),
        ModuleRules(name="X", public_include_paths=[""]),
        ModuleRules(name="X", public_delay_load_dlls=["a.dll", "a.dll"]),
        ModuleRules(name="X", public_definitions=["1BAD=2"]),
    ],
)
def test_validation_rejects_malformed_records(record):
    with pytest.raises(ModuleRulesError):
        record.validate()


def test_to_dict_and_definitions_map():
    rules = ModuleRules(name="X", public_definitions=["FLAG", "LEVEL=3"]).validate()
    assert rules.definitions_map() == {"FLAG": "1", "LEVEL": "3"}
    data = rules.to_dict()
    assert data["name"] == "X"
    assert data["module_type"] == "External"
    assert data["public_definitions"] == ["FLAG", "LEVEL=3"]


def test_expand_path_variables_keeps_unknown():
    path = "$(EngineDir)/Binaries/$(Platform)/x.dll"
    assert expand_path_variables(path, {"EngineDir": "/opt/ue"}) == "/opt/ue/Binaries/$(Platform)/x.dll"


def test_host_target_overrides():
    target = TargetRules.host(engine_dir="/opt/ue")
    assert target.engine_dir == "/opt/ue"
    assert target.platform in TargetPlatform
