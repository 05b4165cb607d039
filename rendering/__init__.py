"""
Rendering module — star shaders, shader variant selection and the per-frame draw entry point.
"""

from .shader_variants import DrawMode, ShaderState, ShaderVariantSelector

__all__ = [
    "DrawMode",
    "ShaderState",
    "ShaderVariantSelector",
]
