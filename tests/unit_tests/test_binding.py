import pytest

from agentgen.binding import BindingContext, QueryParamFilter
from agentgen.utilities import DoubleArray

from proto_builders import (
    FIELD_MASK,
    TYPE_MESSAGE,
    echo_file,
    field,
    field_mask_file,
    message,
    method,
    proto_file,
    rule,
    service,
)

ECHO = "echo/v1/echo.proto"


def say(http, **kwargs):
    return method("Say", ".echo.v1.SayRequest", ".echo.v1.SayResponse", http, **kwargs)


def context_for(registry, file_name=ECHO, binding_index=0) -> BindingContext:
    meth = registry.lookup_file(file_name).services[0].methods[0]
    return BindingContext(meth.bindings[binding_index], registry)


@pytest.fixture
def echo_context(make_registry):
    def _create(*methods) -> BindingContext:
        return context_for(make_registry(echo_file(*methods)))

    return _create


class TestBodyFieldPath:
    @pytest.mark.parametrize(
        "http, expected",
        (
            (rule(get="/v1/echo/{id}"), "*"),
            (rule(post="/v1/echo", body="*"), "*"),
            (rule(post="/v1/echo", body="inner"), "inner"),
            (rule(post="/v1/echo", body="inner.name"), "inner.name"),
        ),
    )
    def test_body_field_path(self, echo_context, http, expected):
        target = echo_context(say(http))

        assert target.body_field_path() == expected


class TestHasQueryParam:
    def test_wildcard_body(self, echo_context):
        target = echo_context(say(rule(post="/v1/echo", body="*")))

        assert target.has_query_param() is False

    def test_fields_left_over(self, echo_context):
        target = echo_context(say(rule(get="/v1/echo/{id}")))

        assert target.has_query_param() is True

    def test_no_request_fields(self, echo_context):
        target = echo_context(
            method("Ping", ".echo.v1.Empty", ".echo.v1.Empty", rule(get="/v1/ping"))
        )

        assert target.has_query_param() is False

    def test_every_field_covered(self, echo_context):
        target = echo_context(
            method(
                "Name",
                ".echo.v1.SayRequest.Inner",
                ".echo.v1.SayResponse",
                rule(put="/v1/names/{name}", body="count"),
            )
        )

        assert target.has_query_param() is False

    def test_nested_path_param_is_not_subtracted(self, make_registry):
        wrap = proto_file(
            "wrap/v1/wrap.proto",
            "wrap.v1",
            messages=[
                message(
                    "Wrapper",
                    field("inner", 1, TYPE_MESSAGE, ".echo.v1.SayRequest.Inner"),
                )
            ],
            services=[
                service(
                    "Wrap",
                    method(
                        "Get",
                        ".wrap.v1.Wrapper",
                        ".echo.v1.SayResponse",
                        rule(get="/v1/wrap/{inner.name}"),
                    ),
                )
            ],
            go_package="example.com/wrap/v1;wrapv1",
            deps=[ECHO],
        )
        registry = make_registry(echo_file(), wrap)

        target = context_for(registry, "wrap/v1/wrap.proto")

        # only top level names are compared, so "inner" is still counted
        assert target.has_query_param() is True


class TestQueryParamFilter:
    def test_single_path_param(self, echo_context):
        target = echo_context(say(rule(get="/v1/echo/{id}")))

        actual = str(target.query_param_filter())

        assert actual == (
            '&utilities.DoubleArray{Encoding: map[string]int{"id": 0}, '
            "Base: []int{1, 1, 0}, Check: []int{0, 1, 2}}"
        )

    def test_nothing_to_filter(self, echo_context):
        target = echo_context(
            method("Ping", ".echo.v1.Empty", ".echo.v1.Empty", rule(get="/v1/ping"))
        )

        actual = str(target.query_param_filter())

        assert actual == (
            "&utilities.DoubleArray{Encoding: map[string]int{}, "
            "Base: []int(nil), Check: []int(nil)}"
        )

    def test_encoding_rendered_in_code_order(self):
        first = DoubleArray(encoding={"a": 0, "b": 1}, base=[1], check=[0])
        second = DoubleArray(encoding={"b": 1, "a": 0}, base=[1], check=[0])

        assert str(QueryParamFilter(first)) == str(QueryParamFilter(second))
        assert 'map[string]int{"a": 0, "b": 1}' in str(QueryParamFilter(second))

    def test_body_and_path_params(self, echo_context):
        target = echo_context(
            say(rule(post="/v1/echo/{id}", body="inner")),
        )

        filter_ = target.query_param_filter()

        assert filter_.double_array.encoding == {"inner": 0, "id": 1}
        assert filter_.double_array.has_common_prefix(["inner", "name"])
        assert filter_.double_array.has_common_prefix(["id"])
        assert not filter_.double_array.has_common_prefix(["text"])


class TestEnumPathParams:
    @pytest.mark.parametrize(
        "template, enum, repeated_enum",
        (
            ("/v1/echo/{id}", False, False),
            ("/v1/echo/{kind}", True, False),
            ("/v1/echo/{kinds}", False, True),
            ("/v1/echo/{kind}/{kinds}", True, True),
        ),
    )
    def test_detection(self, echo_context, template, enum, repeated_enum):
        target = echo_context(say(rule(get=template)))

        assert target.has_enum_path_param() is enum
        assert target.has_repeated_enum_path_param() is repeated_enum

    def test_lookup_enum(self, echo_context):
        target = echo_context(say(rule(get="/v1/echo/{kind}")))

        actual = target.lookup_enum(target.binding.path_params[0])

        assert actual is not None
        assert actual.fqen == ".echo.v1.Kind"

    def test_lookup_enum__not_an_enum(self, echo_context):
        target = echo_context(say(rule(get="/v1/echo/{id}")))

        assert target.lookup_enum(target.binding.path_params[0]) is None


def _mask_registry(make_registry, *fields):
    update = proto_file(
        "update/v1/update.proto",
        "update.v1",
        messages=[message("UpdateRequest", field("id", 1), *fields)],
        services=[
            service(
                "Updater",
                method(
                    "Update",
                    ".update.v1.UpdateRequest",
                    ".update.v1.UpdateRequest",
                    rule(patch="/v1/things/{id}", body="*"),
                ),
            )
        ],
        go_package="example.com/update/v1;updatev1",
        deps=["google/protobuf/field_mask.proto"],
    )
    return make_registry(field_mask_file(), update)


class TestFieldMaskField:
    def test_single_mask(self, make_registry):
        registry = _mask_registry(
            make_registry, field("update_mask", 2, TYPE_MESSAGE, FIELD_MASK)
        )

        target = context_for(registry, "update/v1/update.proto")

        assert target.field_mask_field() == "UpdateMask"

    def test_no_mask(self, make_registry):
        registry = _mask_registry(make_registry)

        target = context_for(registry, "update/v1/update.proto")

        assert target.field_mask_field() == ""

    def test_ambiguous_masks(self, make_registry):
        registry = _mask_registry(
            make_registry,
            field("update_mask", 2, TYPE_MESSAGE, FIELD_MASK),
            field("read_mask", 3, TYPE_MESSAGE, FIELD_MASK),
        )

        target = context_for(registry, "update/v1/update.proto")

        assert target.field_mask_field() == ""


@pytest.mark.parametrize(
    "client_streaming, server_streaming, expected",
    (
        (False, False, False),
        (True, False, True),
        (False, True, True),
        (True, True, True),
    ),
)
def test_is_streaming(echo_context, client_streaming, server_streaming, expected):
    target = echo_context(
        say(
            rule(post="/v1/echo", body="*"),
            client_streaming=client_streaming,
            server_streaming=server_streaming,
        )
    )

    assert target.is_streaming is expected
