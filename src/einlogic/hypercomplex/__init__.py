"""
Hypercomplex numbers and hypercomplex-valued tensors.

The number tower lives in :mod:`einlogic.hypercomplex.numbers`; tensors whose
elements are drawn from one algebra, and their contraction, live in
:mod:`einlogic.hypercomplex.tensor`.
"""

from .numbers import (
    COMPLEX,
    OCTONION,
    QUATERNION,
    REAL,
    SEDENION,
    SEXAGINTAQUATRONION,
    TRIGINTADUONION,
    AlgebraType,
    CayleyDickson,
    Complex,
    Octonion,
    Quaternion,
    Sedenion,
    algebra_dimension,
    associator,
    cayley_dickson_conjugate,
    cayley_dickson_product,
    commutator,
    complex,
    hypercomplex_equal,
    make_hypercomplex,
    octonion,
    quaternion,
    real,
    sedenion,
)
from .tensor import (
    HypercomplexBackend,
    HypercomplexTensor,
    complex_relu,
    create_complex_tensor,
    create_hypercomplex_tensor,
    create_quaternion_tensor,
    extract_norms,
    extract_real_parts,
    get_hypercomplex_element,
    hypercomplex_einsum,
    hypercomplex_tensor_to_string,
    map_hypercomplex_tensor,
    modulus_activation,
    quaternion_relu,
    real_to_hypercomplex,
    set_hypercomplex_element,
    split_activation,
)

__all__ = [
    "AlgebraType",
    "REAL",
    "COMPLEX",
    "QUATERNION",
    "OCTONION",
    "SEDENION",
    "TRIGINTADUONION",
    "SEXAGINTAQUATRONION",
    "algebra_dimension",
    "cayley_dickson_product",
    "cayley_dickson_conjugate",
    "CayleyDickson",
    "Complex",
    "Quaternion",
    "Octonion",
    "Sedenion",
    "make_hypercomplex",
    "real",
    "complex",
    "quaternion",
    "octonion",
    "sedenion",
    "hypercomplex_equal",
    "commutator",
    "associator",
    "HypercomplexTensor",
    "HypercomplexBackend",
    "create_hypercomplex_tensor",
    "create_complex_tensor",
    "create_quaternion_tensor",
    "get_hypercomplex_element",
    "set_hypercomplex_element",
    "map_hypercomplex_tensor",
    "split_activation",
    "modulus_activation",
    "complex_relu",
    "quaternion_relu",
    "extract_real_parts",
    "extract_norms",
    "real_to_hypercomplex",
    "hypercomplex_tensor_to_string",
    "hypercomplex_einsum",
]
