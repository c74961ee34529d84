from dataclasses import dataclass
from typing import Optional, Tuple, Any


@dataclass(frozen=True)
class TypeDescriptor:
    type: str
    params: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class FieldSpec:
    name: Optional[str]  # None for skip directives
    descriptor: TypeDescriptor


@dataclass(frozen=True)
class BlobSpec:
    fields: Tuple[FieldSpec, ...]
    duplicate_names: Tuple[str, ...] = ()


class _SkipDirective:
    """
    The type of `SKIP`, the marker used in place of a field name in a blob spec to skip over a number of bytes.
    """

    def __repr__(self) -> str:
        return 'SKIP'

    def __reduce__(self):
        return 'SKIP'


SKIP = _SkipDirective()
