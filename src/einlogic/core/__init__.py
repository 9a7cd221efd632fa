"""Core runtime modules for einlogic."""

__all__ = [
    "builtins",
    "contraction",
    "engine",
    "exceptions",
    "modal",
    "parser",
    "pln",
    "semiring",
    "shape_checker",
    "stats",
    "tensor",
]
