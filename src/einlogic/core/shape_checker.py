from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .exceptions import ParseError, ShapeError
from .parser import Notation


@dataclass(frozen=True)
class ContractionPlan:
    """
    Everything the contraction iterator needs, resolved once per call.

    ``index_order`` fixes the global position of every symbol;
    ``operand_strides[t][p]`` is the flat-buffer step of operand ``t`` when
    the symbol at position ``p`` advances by one (0 when the operand does not
    use it). ``output_strides`` is the same table for the output buffer.
    """

    notation: Notation
    index_order: Tuple[str, ...]
    index_sizes: Dict[str, int]
    operand_shapes: Tuple[Tuple[int, ...], ...]
    output_shape: Tuple[int, ...]
    segment_strides: Tuple[Tuple[int, ...], ...]
    output_segment_strides: Tuple[int, ...]
    operand_strides: Tuple[Tuple[int, ...], ...]
    output_strides: Tuple[int, ...]

    @property
    def sizes(self) -> Tuple[int, ...]:
        return tuple(self.index_sizes[symbol] for symbol in self.index_order)

    @property
    def contracted(self) -> Tuple[str, ...]:
        return tuple(s for s in self.index_order if s not in self.notation.output)

    @property
    def output_size(self) -> int:
        return _prod(self.output_shape)

    @property
    def joint_size(self) -> int:
        """Number of joint assignments the iterator will visit."""
        return _prod(self.sizes)


def _prod(values: Sequence[int]) -> int:
    result = 1
    for value in values:
        result *= int(value)
    return result


def row_major_strides(shape: Sequence[int]) -> Tuple[int, ...]:
    strides: List[int] = [0] * len(shape)
    stride = 1
    for axis in range(len(shape) - 1, -1, -1):
        strides[axis] = stride
        stride *= int(shape[axis])
    return tuple(strides)


def flat_offset(shape: Sequence[int], coords: Sequence[int]) -> int:
    if len(coords) != len(shape):
        raise IndexError(f"Expected {len(shape)} coordinates, got {len(coords)}")
    offset = 0
    for axis, (coord, stride) in enumerate(zip(coords, row_major_strides(shape))):
        coord = int(coord)
        if not 0 <= coord < int(shape[axis]):
            raise IndexError(
                f"Coordinate {coord} out of range for axis {axis} with size {shape[axis]}"
            )
        offset += coord * stride
    return offset


def validate_operands(notation: Notation, ranks: Sequence[int]) -> None:
    if len(notation.inputs) != len(ranks):
        raise ShapeError(
            f"Notation names {len(notation.inputs)} operand(s) but {len(ranks)} tensor(s) were supplied",
            notation=notation.text or str(notation),
        )
    for position, (labels, rank) in enumerate(zip(notation.inputs, ranks)):
        if len(labels) != int(rank):
            raise ShapeError(
                f"segment '{labels}' has {len(labels)} index symbol(s) but the tensor has rank {rank}",
                operand=position,
                notation=notation.text or str(notation),
            )


def resolve(
    notation: Notation,
    shapes: Sequence[Sequence[int]],
    *,
    repeated_indices: str = "diagonal",
) -> ContractionPlan:
    """
    Resolve index sizes and strides for ``notation`` applied to ``shapes``.

    The first occurrence of a symbol fixes its size; any later occurrence with
    a different size is rejected before iteration starts. A symbol repeated
    inside one operand selects that operand's diagonal unless
    ``repeated_indices="reject"``.
    """

    validate_operands(notation, [len(shape) for shape in shapes])
    label = notation.text or str(notation)
    operand_shapes = tuple(tuple(int(dim) for dim in shape) for shape in shapes)

    sizes: Dict[str, int] = {}
    for position, (labels, shape) in enumerate(zip(notation.inputs, operand_shapes)):
        if repeated_indices == "reject" and len(set(labels)) != len(labels):
            raise ParseError(f"Operand {position} segment '{labels}' repeats an index symbol")
        for symbol, dim in zip(labels, shape):
            if symbol in sizes:
                if sizes[symbol] != dim:
                    raise ShapeError(
                        f"inconsistent index size for '{symbol}': {dim} vs {sizes[symbol]}",
                        operand=position,
                        notation=label,
                    )
            else:
                sizes[symbol] = dim

    missing = [symbol for symbol in notation.output if symbol not in sizes]
    if missing:
        raise ShapeError(
            f"output index(es) {', '.join(missing)} do not appear in any operand",
            notation=label,
        )

    index_order = notation.symbols
    position_of = {symbol: pos for pos, symbol in enumerate(index_order)}

    segment_strides = tuple(row_major_strides(shape) for shape in operand_shapes)
    operand_strides: List[Tuple[int, ...]] = []
    for labels, strides in zip(notation.inputs, segment_strides):
        table = [0] * len(index_order)
        for symbol, stride in zip(labels, strides):
            table[position_of[symbol]] += stride
        operand_strides.append(tuple(table))

    output_shape = tuple(sizes[symbol] for symbol in notation.output)
    output_segment_strides = row_major_strides(output_shape)
    output_table = [0] * len(index_order)
    for symbol, stride in zip(notation.output, output_segment_strides):
        output_table[position_of[symbol]] = stride

    return ContractionPlan(
        notation=notation,
        index_order=index_order,
        index_sizes=sizes,
        operand_shapes=operand_shapes,
        output_shape=output_shape,
        segment_strides=segment_strides,
        output_segment_strides=output_segment_strides,
        operand_strides=tuple(operand_strides),
        output_strides=tuple(output_table),
    )
