"""
Row assemblers: build output rows from already-converted cells.

Assemblers handle ONLY the structure of a typed row (positional list or
name-keyed mapping). They never convert values; conversion happened in the
rule table before a row reaches them.
"""
from collections.abc import Callable, Sequence
from typing import Any

from anonrows.adapters.column_info import ColumnDescriptor

from libb import attrdict

ROW_SHAPES = ('positional', 'mapped', 'attrdict')


class RowAssembler:
    """Base assembler providing a consistent interface"""

    def __init__(self, descriptors: Sequence[ColumnDescriptor]) -> None:
        self.descriptors = tuple(descriptors)
        self.names = tuple(d.name for d in self.descriptors)

    def __call__(self, cells: Sequence[Any]) -> Any:
        """Assemble one row from cells aligned with the descriptors"""
        raise NotImplementedError('Subclasses must implement __call__ method')


class PositionalRowAssembler(RowAssembler):
    """Rows as lists in descriptor order"""

    def __call__(self, cells: Sequence[Any]) -> list[Any]:
        return list(cells)


class MappedRowAssembler(RowAssembler):
    """Rows as mappings from column name to value

    Relies on names being unique, which extraction guarantees.
    """

    def __init__(self, descriptors: Sequence[ColumnDescriptor],
                 factory: Callable[..., dict] = dict) -> None:
        super().__init__(descriptors)
        self.factory = factory

    def __call__(self, cells: Sequence[Any]) -> dict[str, Any]:
        return self.factory(zip(self.names, cells))


def get_row_assembler(shape: str, descriptors: Sequence[ColumnDescriptor]) -> RowAssembler:
    """Factory for the assembler of a row shape.

    Args:
        shape: 'positional', 'mapped' or 'attrdict'
        descriptors: Column descriptors of the scan

    Returns
        RowAssembler instance
    """
    if shape == 'positional':
        return PositionalRowAssembler(descriptors)
    if shape == 'mapped':
        return MappedRowAssembler(descriptors)
    if shape == 'attrdict':
        return MappedRowAssembler(descriptors, factory=attrdict)
    raise ValueError(f'row_shape must be one of: {list(ROW_SHAPES)}')
