"""Tablas de traducción plataforma/etapa -> strings de shaderc.

Son tablas estáticas: shaderc define sus propios identificadores para
`--platform`, `--type` y `--profile`, y aquí solo los mapeamos.
Lo que no aparece en una tabla se traduce a cadena vacía.
"""

from __future__ import annotations

from core.domain.models import ShaderCodePlatform, ShaderStage

P = ShaderCodePlatform

_PLATFORM_STRINGS: dict[ShaderCodePlatform, str] = {
    P.ESSL_100: "android",
    P.ESSL_300: "android",
    P.ESSL_310: "android",
    P.Direct3D_SM20_Level_9_1: "windows",
    P.Direct3D_SM20_Level_9_2: "windows",
    P.Direct3D_SM20_Level_9_3: "windows",
    P.Direct3D_SM30: "windows",
    P.Direct3D_SM40: "windows",
    P.Direct3D_SM50: "windows",
    P.Direct3D_SM60: "windows",
    P.Metal: "osx",
    P.Vulkan: "linux",
}

_TYPE_STRINGS: dict[ShaderStage, str] = {
    ShaderStage.Vertex: "vertex",
    ShaderStage.Fragment: "fragment",
    ShaderStage.Compute: "compute",
    ShaderStage.Unknown: "fragment",
}

_STAGE_PREFIXES: dict[ShaderStage, str] = {
    ShaderStage.Vertex: "v",
    ShaderStage.Fragment: "p",
    ShaderStage.Compute: "c",
    ShaderStage.Unknown: "p",
}

# Perfiles HLSL: se anteponen con el prefijo de etapa (vs_/ps_/cs_).
_HLSL_PROFILES: dict[ShaderCodePlatform, str] = {
    P.Direct3D_SM20_Level_9_1: "s_4_0_level_9_1",
    P.Direct3D_SM20_Level_9_2: "s_4_0_level_9_2",
    P.Direct3D_SM20_Level_9_3: "s_4_0_level_9_3",
    P.Direct3D_SM30: "s_3_0",
    P.Direct3D_SM40: "s_4_0",
    P.Direct3D_SM50: "s_5_0",
    P.Direct3D_SM60: "s_5_0",
}

_FIXED_PROFILES: dict[ShaderCodePlatform, str] = {
    P.GLSL_120: "120",
    P.GLSL_430: "430",
    P.ESSL_100: "",
    P.ESSL_300: "",
    P.ESSL_310: "",
    P.Metal: "metal",
    P.Vulkan: "spirv",
}

del P


def to_platform_string(platform: ShaderCodePlatform) -> str:
    return _PLATFORM_STRINGS.get(platform, "")


def to_type_string(stage: ShaderStage) -> str:
    return _TYPE_STRINGS.get(stage, "")


def to_profile_string(platform: ShaderCodePlatform, stage: ShaderStage) -> str:
    """Perfil de shader model para `--profile`.

    Ejemplos: (Direct3D_SM50, Vertex) -> "vs_5_0"; (Vulkan, *) -> "spirv".
    """

    suffix = _HLSL_PROFILES.get(platform)
    if suffix is not None:
        return _STAGE_PREFIXES.get(stage, "") + suffix
    return _FIXED_PROFILES.get(platform, "")


def is_supported(platform: ShaderCodePlatform) -> bool:
    """True si la plataforma tiene backend en shaderc."""

    return bool(to_platform_string(platform))


def profile_table() -> list[tuple[ShaderCodePlatform, str, dict[ShaderStage, str]]]:
    """Vista completa de las tablas (para `shaderc-bridge profiles`)."""

    rows = []
    for platform in ShaderCodePlatform:
        profiles = {stage: to_profile_string(platform, stage) for stage in ShaderStage}
        rows.append((platform, to_platform_string(platform), profiles))
    return rows
