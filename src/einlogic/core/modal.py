"""
Linear-logic usage disciplines for tensors.

* ``linear``: must be used exactly once and cannot be discarded unused.
* ``affine``: used at most once, may be discarded.
* ``bang``: shared read-only, any number of uses; every use gets a copy.
* ``with``: one branch of a choice, used at most once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import LinearityError
from .tensor import Tensor, clone, ensure_tensor

__all__ = [
    "MODALITIES",
    "ModalTensor",
    "create_linear_tensor",
    "create_affine_tensor",
    "create_bang_tensor",
    "create_with_tensor",
    "use_modal_tensor",
    "discard_modal_tensor",
    "can_use_modal_tensor",
]

MODALITIES = ("linear", "affine", "bang", "with")


@dataclass
class ModalTensor:
    tensor: Tensor
    modality: str
    use_count: int = 0
    max_uses: Optional[int] = 1  # None means unlimited
    consumed: bool = False

    def __post_init__(self) -> None:
        ensure_tensor(self.tensor)
        if self.modality not in MODALITIES:
            raise ValueError(
                f"Unknown modality '{self.modality}'. Available: {', '.join(MODALITIES)}"
            )


def _wrap(tensor: Tensor, modality: str, max_uses: Optional[int]) -> ModalTensor:
    ensure_tensor(tensor)
    return ModalTensor(tensor=clone(tensor), modality=modality, max_uses=max_uses)


def create_linear_tensor(tensor: Tensor) -> ModalTensor:
    return _wrap(tensor, "linear", 1)


def create_affine_tensor(tensor: Tensor) -> ModalTensor:
    return _wrap(tensor, "affine", 1)


def create_bang_tensor(tensor: Tensor) -> ModalTensor:
    return _wrap(tensor, "bang", None)


def create_with_tensor(tensor: Tensor) -> ModalTensor:
    return _wrap(tensor, "with", 1)


def can_use_modal_tensor(modal: ModalTensor) -> bool:
    if modal.modality == "bang":
        return True
    return not modal.consumed and (modal.max_uses is None or modal.use_count < modal.max_uses)


def use_modal_tensor(modal: ModalTensor) -> Tensor:
    """
    Take the tensor out of ``modal``.

    Linear and affine wrappers hand over their own tensor and become
    consumed; ``bang`` and ``with`` return a copy.
    """

    if modal.modality != "bang":
        if modal.consumed:
            raise LinearityError(f"{modal.modality} tensor '{modal.tensor.name}' was already consumed")
        if modal.max_uses is not None and modal.use_count >= modal.max_uses:
            raise LinearityError(
                f"{modal.modality} tensor '{modal.tensor.name}' exceeded {modal.max_uses} use(s)"
            )
    modal.use_count += 1
    if modal.modality in ("linear", "affine"):
        modal.consumed = True
        return modal.tensor
    return clone(modal.tensor)


def discard_modal_tensor(modal: ModalTensor) -> None:
    if modal.modality == "linear" and not modal.consumed:
        raise LinearityError(
            f"linear tensor '{modal.tensor.name}' must be used and cannot be discarded"
        )
    modal.consumed = True
