"""Defines the per provider registry of type converters and its resolution order."""

import inspect
import logging
import threading
import typing
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, Union

from dbmatic.models.enums import ProviderType
from dbmatic.types.converters import TypeConverter
from dbmatic.types.descriptors import HostTypeDescriptor, HostTypeKind, SqlTypeDescriptor
from dbmatic.types.errors import TypeMapFrozenError
from dbmatic.types.hosts import qualified_name

HostKey = Union[type, str]
ConverterLike = Union[TypeConverter, Callable]


def _as_converter(converter: ConverterLike) -> TypeConverter:
    return converter if isinstance(converter, TypeConverter) else TypeConverter(converter)


def _as_keys(keys) -> List:
    if isinstance(keys, (list, tuple, set, frozenset)):
        return list(keys)
    return [keys]


class ProviderTypeMap(ABC):
    """A registry of converters mapping host types to one provider's SQL types and back.

    Forward lookups (host to SQL) try, in order: converters registered for the exact host type (or its
    qualified name), converters registered for a base class of a primitive host type, and finally the
    converters registered for the descriptor's kind (enum, array, collection, object). Reverse lookups
    (SQL to host) are keyed by the lower-cased base type name with length, precision and scale removed.

    Within one slot converters are tried in registration order and the first that produces a result wins.
    Maps register their converters on construction and are frozen afterwards unless ``freeze=False``
    is given, in which case callers may register more converters and call ``freeze()`` themselves.
    """

    provider_type: ProviderType = None

    def __init__(self, freeze: bool = True):
        """Construct and populate the type map.

        :param freeze: freeze the map once the provider's converters are registered, defaults to True
        """
        self.logger = logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._frozen = False
        self._host_converters: Dict[HostKey, List[TypeConverter]] = {}
        self._kind_converters: Dict[HostTypeKind, List[TypeConverter]] = {}
        self._sql_converters: Dict[str, List[TypeConverter]] = {}
        self.register_converters()
        if freeze:
            self.freeze()

    @abstractmethod
    def register_converters(self):
        """Register the provider's converters, called once from the constructor."""
        pass  # pragma: no cover

    @property
    def frozen(self) -> bool:
        """Whether the map still accepts registrations."""
        return self._frozen

    def freeze(self):
        """Stop accepting registrations, lookups never take a write path after this point."""
        with self._lock:
            self._frozen = True

    def _register(self, registry: dict, key, converter: ConverterLike, prepend: bool):
        with self._lock:
            if self._frozen:
                raise TypeMapFrozenError(f"The {type(self).__name__} is frozen, cannot register for '{key}'")
            converters = registry.setdefault(key, [])
            if prepend:
                converters.insert(0, _as_converter(converter))
            else:
                converters.append(_as_converter(converter))

    def register_host_converter(self, host_types, converter: ConverterLike, prepend: bool = False):
        """Register a host to SQL converter for one or more host types.

        :param host_types: a type, a qualified type name, or a sequence of either
        :param converter: a TypeConverter or a plain function of a HostTypeDescriptor
        :param prepend: try this converter before those already registered for the same type
        :raises: TypeMapFrozenError
        """
        for host_type in _as_keys(host_types):
            self._register(self._host_converters, host_type, converter, prepend)

    def register_kind_converter(self, kind: HostTypeKind, converter: ConverterLike, prepend: bool = False):
        """Register the fallback converter for a whole kind of host types, e.g. every enum.

        :param kind: the host type kind
        :param converter: a TypeConverter or a plain function of a HostTypeDescriptor
        :param prepend: try this converter before those already registered for the kind
        :raises: TypeMapFrozenError
        """
        self._register(self._kind_converters, kind, converter, prepend)

    def register_sql_converter(self, base_type_names, converter: ConverterLike, prepend: bool = False):
        """Register a SQL to host converter for one or more base SQL type names.

        :param base_type_names: a base type name such as "varchar", or a sequence of them
        :param converter: a TypeConverter or a plain function of a SqlTypeDescriptor
        :param prepend: try this converter before those already registered for the same name
        :raises: TypeMapFrozenError
        """
        for name in _as_keys(base_type_names):
            self._register(self._sql_converters, name.lower(), converter, prepend)

    def _forward_converters(self, descriptor: HostTypeDescriptor) -> List[TypeConverter]:
        host_type = descriptor.host_type
        converters = []
        with self._lock:
            try:
                converters += self._host_converters.get(host_type, [])
            except TypeError:
                pass  # unhashable parameterised generics only resolve by kind
            converters += self._host_converters.get(qualified_name(host_type), [])
            if descriptor.kind is HostTypeKind.PRIMITIVE and inspect.isclass(host_type):
                for base in host_type.__mro__[1:]:
                    if base is not object:
                        converters += self._host_converters.get(base, [])
            if descriptor.kind is not HostTypeKind.PRIMITIVE:
                converters += self._kind_converters.get(descriptor.kind, [])
        return converters

    def try_get_sql_type(self, descriptor: Union[HostTypeDescriptor, type]) -> Optional[SqlTypeDescriptor]:
        """Find the provider SQL type for a host type.

        :param descriptor: the host type descriptor, a bare type is wrapped in a default descriptor
        :returns: the SQL type descriptor, or None when the provider cannot represent the host type
        :raises: ValueError when the descriptor is None
        """
        if descriptor is None:
            raise ValueError("A host type descriptor is required")
        if not isinstance(descriptor, HostTypeDescriptor):
            descriptor = HostTypeDescriptor(descriptor)
        for converter in self._forward_converters(descriptor):
            result, ok = converter.try_convert(descriptor)
            if ok:
                return result
        return None

    def try_get_host_type(self, sql_type: Union[SqlTypeDescriptor, str]) -> Optional[HostTypeDescriptor]:
        """Find the host type for a provider SQL type.

        :param sql_type: the SQL type text (e.g. "numeric(10,2)") or an already parsed descriptor
        :returns: the host type descriptor, or None when no converter recognizes the SQL type
        :raises: ValueError when the SQL type is None or empty
        """
        if sql_type is None:
            raise ValueError("A SQL type is required")
        descriptor = sql_type if isinstance(sql_type, SqlTypeDescriptor) else SqlTypeDescriptor.parse(sql_type)
        if descriptor.base_type_name.endswith("[]"):
            return self._try_get_array_host_type(descriptor)
        with self._lock:
            converters = list(self._sql_converters.get(descriptor.base_type_name, []))
        for converter in converters:
            result, ok = converter.try_convert(descriptor)
            if ok:
                return result
        return self.affinity_host_type(descriptor)

    def _try_get_array_host_type(self, descriptor: SqlTypeDescriptor) -> Optional[HostTypeDescriptor]:
        element_text = descriptor.sql_type_name.strip()
        element_text = element_text[: element_text.rindex("[")].strip()
        element = self.try_get_host_type(element_text)
        if element is None:
            return None
        return HostTypeDescriptor(
            typing.Tuple[element.host_type, ...],
            length=element.length,
            precision=element.precision,
            scale=element.scale,
        )

    def affinity_host_type(self, descriptor: SqlTypeDescriptor) -> Optional[HostTypeDescriptor]:
        """Resolve a SQL type no converter recognized by its broad category, by default nothing is resolved.

        :param descriptor: the SQL type descriptor
        :returns: a host type descriptor, or None
        """
        return None

    def registered_host_types(self) -> Iterable[HostKey]:
        """Return the host types (and qualified type names) that have exact registrations."""
        with self._lock:
            return tuple(self._host_converters.keys())

    def registered_sql_types(self) -> Iterable[str]:
        """Return the base SQL type names that have registrations."""
        with self._lock:
            return tuple(self._sql_converters.keys())
