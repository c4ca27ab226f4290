import pytest

from agentgen.core import DescriptorError
from agentgen.httprule import parse_path_template


@pytest.mark.parametrize(
    "template, variables, verb",
    (
        ("/v1/echo", (), ""),
        ("/v1/echo/{id}", ("id",), ""),
        ("/v1/{parent=shelves/*}/books/{book_id}", ("parent", "book_id"), ""),
        ("/v1/{inner.name}", ("inner.name",), ""),
        ("/v1/{name=operations/*}:cancel", ("name",), "cancel"),
        ("/v1/echo:say", (), "say"),
        ("/v1/{ name }", ("name",), ""),
    ),
)
def test_parse_path_template(template, variables, verb):
    actual = parse_path_template(template)

    assert actual.template == template
    assert actual.variables == variables
    assert actual.verb == verb


@pytest.mark.parametrize(
    "template",
    (
        "v1/echo",
        "",
        "/v1/{id",
        "/v1/id}",
        "/v1/{}",
        "/v1/{1abc}",
        "/v1/{id}/{id}",
        "/v1/{a..b}",
    ),
)
def test_parse_path_template__invalid(template):
    with pytest.raises(DescriptorError):
        parse_path_template(template)
