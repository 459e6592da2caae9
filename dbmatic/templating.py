"""Implements the small templating grammar used to write driver neutral catalog queries."""

from typing import Callable, Tuple, Union

from dbmatic.errors import MissingTemplateArgumentError, TemplateError

# fmt: off
from pyparsing import (  # noqa: I101
    alphanums, alphas, printables,
    Combine, Forward, Group, OneOrMore, Suppress, White, Word, ZeroOrMore, ParseBaseException,
    ParseResults
)
# fmt: on


class TemplateParameter:
    """Represents a value reference found in a template."""

    def __init__(self, kwarg_path: Tuple[str], is_replace: bool = False):
        """Construct a template parameter.

        :param kwarg_path: the 'path' of the value in the root dictionary of arguments
        :param is_replace: is this parameter rendered directly into the SQL instead of being bound
        """
        self.is_replace = is_replace
        self.kwarg_path = kwarg_path


def set_result_type(subject: str, position: int, result: ParseResults):
    """For use with forward lookup groups to inject suppressed characters into the parse result.

    :param subject: string being parsed
    :param position: position in the string the parsing is taking place
    :param result: the parse result object for the given position / subject
    """
    result[0].insert(0, subject[position])


class Template:
    """A SQL template supporting bound (``#{name}``) and direct (``!{name}``) replacement.

    Catalog queries are written once as templates and rendered per connection, so that each driver
    receives its own placeholder style (``?``, ``%s``, ``$1`` ...).
    """

    # fmt: off
    OPEN_VAR     = Suppress("#{")                                                           # noqa: E221
    OPEN_REP     = Suppress("!{")                                                           # noqa: E221
    OPENS        = (OPEN_VAR | OPEN_REP)                                                    # noqa: E221
    CLOSE        = Suppress("}")                                                            # noqa: E221
    LONERS       = ((~OPENS + "#") | (~OPENS + "!") |                                       # noqa: E221
                    (~OPENS + "{") | (~OPENS + "}"))                                        # noqa: E221
    IDENTIFIER   = Word(alphas, alphanums + "_")                                            # noqa: E221
    REPLACEMENT  = (IDENTIFIER + ZeroOrMore(Suppress(".") + IDENTIFIER))                    # noqa: E221
    PLAIN_TEXT   = Word(printables, excludeChars="#!{}")                                    # noqa: E221
    NULL_SPACE   = ZeroOrMore(White())                                                      # noqa: E221
    LOOKUP_VAR   = Forward()                                                                # noqa: E221
    LOOKUP_REP   = Forward()                                                                # noqa: E221
    SQL_FRAGMENT = Combine(NULL_SPACE + OneOrMore(PLAIN_TEXT | LONERS) + NULL_SPACE)        # noqa: E221
    LOOKUP_VAR  << Group(OPEN_VAR + REPLACEMENT + CLOSE).add_parse_action(set_result_type)  # noqa: E221
    LOOKUP_REP  << Group(OPEN_REP + REPLACEMENT + CLOSE).add_parse_action(set_result_type)  # noqa: E221
    LOOKUP       = (LOOKUP_VAR | LOOKUP_REP)                                                # noqa: E221
    GRAMMAR      = OneOrMore(NULL_SPACE + LOOKUP + NULL_SPACE | SQL_FRAGMENT)               # noqa: E221
    # fmt: on

    def __init__(self, sql_template: str):
        """Parse a SQL template.

        :param sql_template: the raw SQL template as a plain string
        :raises: TemplateError
        """
        self._sql_template = sql_template
        self._parsed_template = []
        self._arguments = []
        try:
            nodes = self.GRAMMAR.parse_string(sql_template, parse_all=True)
        except ParseBaseException as x:
            raise TemplateError(f"{x.msg}:\n{x.line}\n{(' ' * (x.col - 1))}^") from x
        for node in nodes:
            if not isinstance(node, str):
                is_replace = node.pop(0) == "!"
                node = tuple(map(str, node))
                if node not in self._arguments:
                    self._arguments.append(node)
                self._parsed_template.append(TemplateParameter(node, is_replace))
                continue
            # Consecutive text nodes are merged into one fragment
            previous = self._parsed_template.pop() if self._parsed_template else ""
            previous = [previous + node] if isinstance(previous, str) else [previous, node]
            self._parsed_template += previous
        self._arguments = tuple(self._arguments)

    @property
    def arguments(self) -> Tuple[Tuple[str]]:
        """Return the argument paths referenced by the template, in order of first appearance."""
        return self._arguments

    def __str__(self) -> str:
        """Return the raw template text."""
        return self._sql_template

    @staticmethod
    def _resolve_value(kwarg_path: Tuple[str], root_args: dict):
        node = root_args
        try:
            for arg_name in kwarg_path:
                node = node[arg_name] if isinstance(node, dict) else getattr(node, arg_name)
        except (KeyError, AttributeError) as x:
            raise MissingTemplateArgumentError(f"No value for template argument '{'.'.join(kwarg_path)}'") from x
        return node

    def render(self, mung_symbol: Union[str, Callable[[], str]], kwargs: dict) -> Tuple[str, tuple]:
        """Render the template to SQL execution arguments.

        :param mung_symbol: the placeholder, or a callable producing the next placeholder, for bound parameters
        :param kwargs: the root dictionary of key word arguments to resolve parameters from
        :returns: a tuple where the first element is a SQL statement and the second is a tuple of its parameters
        :raises: MissingTemplateArgumentError
        """
        munged = ""
        parameters = []
        cache = {}
        for frag in self._parsed_template:
            if isinstance(frag, TemplateParameter):
                if frag.kwarg_path not in cache:
                    cache[frag.kwarg_path] = self._resolve_value(frag.kwarg_path, kwargs)
                value = cache[frag.kwarg_path]
                if frag.is_replace:
                    frag = str(value)
                else:
                    parameters.append(value)
                    frag = mung_symbol() if callable(mung_symbol) else mung_symbol
            munged += frag
        return munged, tuple(parameters)
