"""Tests for the catalog query templates."""

from typing import Tuple

from dbmatic.errors import MissingTemplateArgumentError, TemplateError
from dbmatic.mung import NumberedMungSymbolProvider
from dbmatic.templating import Template

import pytest

from tests.templating.template_cases import GOOD_CASES, INVALID_CASES, MUNG_SYMBOL


@pytest.mark.parametrize("init, ex_args, r_kwargs, ex_render, ", GOOD_CASES)
def test_valid_templates(init: Tuple, ex_args: Tuple[Tuple[str]], r_kwargs: dict, ex_render: Tuple[str, Tuple]):
    """Tests functionality around well-formed SQL template strings."""
    template = Template(*init)
    assert template.arguments == ex_args
    assert str(template) == init[0]
    sql, values = template.render(MUNG_SYMBOL, r_kwargs)
    assert sql == ex_render[0]
    assert values == ex_render[1]


@pytest.mark.parametrize("init, error", INVALID_CASES)
def test_invalid_template(init, error):
    """Tests an invalid template raises the appropriate error."""
    with pytest.raises(TemplateError, match=error):
        Template(*init)


def test_numbered_placeholders():
    """Tests a numbered placeholder provider hands out one number per bound value."""
    template = Template("SELECT * FROM t WHERE a = #{a} AND b = #{b} AND c = #{a}")
    sql, values = template.render(NumberedMungSymbolProvider(), {"a": 1, "b": 2})
    assert sql == "SELECT * FROM t WHERE a = $1 AND b = $2 AND c = $3"
    assert values == (1, 2, 1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"table": {}},
        {"table": object()},
    ],
)
def test_missing_argument(kwargs: dict):
    """Tests rendering fails when a referenced argument cannot be resolved."""
    template = Template("SELECT * FROM t WHERE name = #{table.name}")
    with pytest.raises(MissingTemplateArgumentError, match="table.name"):
        template.render(MUNG_SYMBOL, kwargs)
