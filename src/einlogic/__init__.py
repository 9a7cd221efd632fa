from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _load_version

from . import hypercomplex, logic
from .core.builtins import (
    add,
    broadcast_add,
    broadcast_multiply,
    extract_slice,
    multiply,
    relu,
    scale,
    sigmoid,
    softmax,
    step,
    threshold,
    transpose,
)
from .core.contraction import (
    ContractionConfig,
    RealBackend,
    SemiringBackend,
    einsum,
    semiring_einsum,
)
from .core.engine import ContractionEngine
from .core.exceptions import (
    AlgebraError,
    BackendError,
    EinlogicError,
    LinearityError,
    ParseError,
    ResourceLimitError,
    ShapeError,
)
from .core.modal import (
    ModalTensor,
    can_use_modal_tensor,
    create_affine_tensor,
    create_bang_tensor,
    create_linear_tensor,
    create_with_tensor,
    discard_modal_tensor,
    use_modal_tensor,
)
from .core.parser import Notation, parse_notation
from .core.pln import (
    PLNTensor,
    TruthValue,
    create_pln_tensor,
    create_truth_value,
    pln_conjunction,
    pln_deduction,
    pln_disjunction,
    pln_negation,
    pln_revision,
    pln_tensor_conjunction,
)
from .core.semiring import (
    BOOLEAN,
    COUNTING,
    MIN_PLUS,
    PROBABILISTIC,
    SEMIRINGS,
    TROPICAL,
    VITERBI,
    Semiring,
    get_semiring,
)
from .core.shape_checker import ContractionPlan, resolve
from .core.stats import (
    ResourceProfile,
    combine_resources_parallel,
    combine_resources_sequential,
    compute_einsum_stats,
    estimate_einsum_resources,
    estimate_tensor_resources,
)
from .core.tensor import (
    Tensor,
    clone,
    create_tensor,
    from_matrix,
    from_vector,
    get_element,
    identity,
    set_element,
    tensor_to_string,
)
from .hypercomplex import HypercomplexTensor, hypercomplex_einsum

try:
    __version__ = _load_version("einlogic")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Tensor",
    "create_tensor",
    "from_matrix",
    "from_vector",
    "identity",
    "clone",
    "get_element",
    "set_element",
    "tensor_to_string",
    "Notation",
    "parse_notation",
    "ContractionPlan",
    "resolve",
    "ContractionConfig",
    "ContractionEngine",
    "RealBackend",
    "SemiringBackend",
    "einsum",
    "semiring_einsum",
    "hypercomplex_einsum",
    "HypercomplexTensor",
    "Semiring",
    "BOOLEAN",
    "COUNTING",
    "VITERBI",
    "PROBABILISTIC",
    "MIN_PLUS",
    "TROPICAL",
    "SEMIRINGS",
    "get_semiring",
    "threshold",
    "step",
    "sigmoid",
    "relu",
    "softmax",
    "add",
    "multiply",
    "scale",
    "transpose",
    "broadcast_add",
    "broadcast_multiply",
    "extract_slice",
    "compute_einsum_stats",
    "ResourceProfile",
    "estimate_tensor_resources",
    "estimate_einsum_resources",
    "combine_resources_sequential",
    "combine_resources_parallel",
    "TruthValue",
    "create_truth_value",
    "pln_conjunction",
    "pln_disjunction",
    "pln_negation",
    "pln_deduction",
    "pln_revision",
    "PLNTensor",
    "create_pln_tensor",
    "pln_tensor_conjunction",
    "ModalTensor",
    "create_linear_tensor",
    "create_affine_tensor",
    "create_bang_tensor",
    "create_with_tensor",
    "use_modal_tensor",
    "discard_modal_tensor",
    "can_use_modal_tensor",
    "EinlogicError",
    "ParseError",
    "ShapeError",
    "AlgebraError",
    "ResourceLimitError",
    "BackendError",
    "LinearityError",
    "hypercomplex",
    "logic",
    "__version__",
]
