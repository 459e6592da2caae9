"""Single purpose conversion units shared by both mapping directions."""

from typing import Callable, Generic, Optional, Tuple, TypeVar

from dbmatic.types.descriptors import HostTypeDescriptor, SqlTypeDescriptor

S = TypeVar("S")
T = TypeVar("T")


class TypeConverter(Generic[S, T]):
    """Wraps a pure function that converts a source descriptor into a target descriptor.

    The function signals "no mapping" by returning None, which lets a later registered converter win.
    """

    def __init__(self, func: Callable[[S], Optional[T]]):
        """Construct a type converter.

        :param func: a pure function of the source, returning the target or None
        """
        self._func = func

    def try_convert(self, source: S) -> Tuple[Optional[T], bool]:
        """Attempt the conversion.

        :param source: the descriptor to convert
        :returns: a tuple of the converted value and whether the conversion succeeded
        :raises: ValueError when the source is None
        """
        if source is None:
            raise ValueError("Cannot convert a None source")
        target = self._func(source)
        if target is None:
            return None, False
        return target, True

    def __repr__(self) -> str:
        return f"TypeConverter({getattr(self._func, '__qualname__', self._func)!r})"


HostToSqlConverter = TypeConverter[HostTypeDescriptor, SqlTypeDescriptor]
SqlToHostConverter = TypeConverter[SqlTypeDescriptor, HostTypeDescriptor]
