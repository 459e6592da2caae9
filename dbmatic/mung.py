"""Placeholder ("mung symbol") providers used when rendering catalog SQL templates for a driver."""

from abc import ABC, abstractmethod


class MungSymbolProvider(ABC):
    """Abstract base for producing the bound parameter placeholder a driver expects."""

    @abstractmethod
    def __call__(self) -> str:
        """Return the placeholder for the next bound parameter.

        :returns: the placeholder string
        """
        pass  # pragma: no cover


class StaticMungSymbolProvider(MungSymbolProvider):
    """Returns the same placeholder for every parameter, e.g. ``?`` or ``%s``."""

    def __init__(self, symbol: str):
        """Construct a static placeholder provider.

        :param symbol: the placeholder returned on every call
        """
        self._symbol = symbol

    def __call__(self) -> str:  # noqa: D102
        return self._symbol

    def __repr__(self) -> str:
        return f"StaticMungSymbolProvider({self._symbol!r})"


class NumberedMungSymbolProvider(MungSymbolProvider):
    """Returns positional placeholders (``$1``, ``$2`` ...), one number per parameter.

    Instances are stateful, a fresh one must be used for every rendered statement.
    """

    def __init__(self, start: int = 1, prefix: str = "$"):
        """Construct a numbered placeholder provider.

        :param start: the first number handed out, defaults to 1
        :param prefix: the text placed before the number, defaults to "$"
        """
        self._counter = start
        self._prefix = prefix

    def __call__(self) -> str:  # noqa: D102
        symbol = f"{self._prefix}{self._counter}"
        self._counter += 1
        return symbol


def mung_symbol_for_paramstyle(paramstyle: str) -> MungSymbolProvider:
    """Build a placeholder provider for a DB API 2.0 ``paramstyle``.

    Only positional styles are supported since templates render parameters as a tuple.

    :param paramstyle: one of "qmark", "format", "numeric" or "dollar"
    :returns: a new placeholder provider
    :raises: ValueError
    """
    if paramstyle == "qmark":
        return StaticMungSymbolProvider("?")
    if paramstyle == "format":
        return StaticMungSymbolProvider("%s")
    if paramstyle == "numeric":
        return NumberedMungSymbolProvider(1, ":")
    if paramstyle == "dollar":
        return NumberedMungSymbolProvider(1, "$")
    raise ValueError(f"Unsupported paramstyle '{paramstyle}'")
