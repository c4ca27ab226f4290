from __future__ import annotations

import logging

from agentgen.const import BODY_WILDCARD, FIELD_MASK_TYPE
from agentgen.core import DescriptorError
from agentgen.descriptor import Binding, Enum, Field, Method, Parameter, Registry
from agentgen.helpers import camel_case, go_int_slice, go_quote
from agentgen.utilities import DoubleArray

_LOGGER = logging.getLogger(__name__)


class QueryParamFilter:
    """A DoubleArray that renders itself as a stable Go literal."""

    def __init__(self, double_array: DoubleArray) -> None:
        self.double_array = double_array

    def __str__(self) -> str:
        da = self.double_array
        # index by code so the output never depends on dict ordering
        encodings = [""] * len(da.encoding)
        for token, code in da.encoding.items():
            encodings[code] = f"{go_quote(token)}: {code}"
        return (
            "&utilities.DoubleArray{"
            f"Encoding: map[string]int{{{', '.join(encodings)}}}, "
            f"Base: {go_int_slice(da.base or None)}, "
            f"Check: {go_int_slice(da.check or None)}}}"
        )


class BindingContext:
    """Facts about a binding that the handler template needs."""

    def __init__(
        self,
        binding: Binding,
        registry: Registry,
        allow_patch_feature: bool = False,
    ) -> None:
        self.binding = binding
        self.registry = registry
        self.allow_patch_feature = allow_patch_feature

    @property
    def index(self) -> int:
        return self.binding.index

    @property
    def method(self) -> Method:
        return self.binding.method

    @property
    def is_streaming(self) -> bool:
        return self.method.client_streaming or self.method.server_streaming

    def body_field_path(self) -> str:
        """Return the binding body's field path, or ``*`` for the whole request."""
        body = self.binding.body
        if body is not None and len(body.field_path) != 0:
            return str(body.field_path)
        return BODY_WILDCARD

    def has_query_param(self) -> bool:
        """Whether the binding needs parameters in the query string.

        Only top-level field names are compared against the full body and
        path parameter paths, so this can answer True when every field is
        in fact covered. That only costs a few extra generated lines.
        """
        body = self.binding.body
        if body is not None and len(body.field_path) == 0:
            return False

        fields = {f.name for f in self.method.request_type.fields}
        if body is not None:
            fields.discard(str(body.field_path))
        for param in self.binding.path_params:
            fields.discard(str(param.field_path))
        return len(fields) > 0

    def query_param_filter(self) -> QueryParamFilter:
        seqs = []
        if self.binding.body is not None:
            seqs.append(str(self.binding.body.field_path).split("."))
        for param in self.binding.path_params:
            seqs.append(str(param.field_path).split("."))
        return QueryParamFilter(DoubleArray.build(seqs))

    def has_enum_path_param(self) -> bool:
        return self._has_enum_path_param(repeated=False)

    def has_repeated_enum_path_param(self) -> bool:
        return self._has_enum_path_param(repeated=True)

    def _has_enum_path_param(self, repeated: bool) -> bool:
        return any(
            p.is_enum and p.is_repeated == repeated for p in self.binding.path_params
        )

    def lookup_enum(self, param: Parameter) -> Enum | None:
        try:
            return self.registry.lookup_enum("", param.target.type_name)
        except DescriptorError:
            _LOGGER.debug("No enum for path parameter %s", param.field_path)
            return None

    def field_mask_field(self) -> str:
        """Go name of the request's FieldMask field if there is exactly one."""
        field_mask: Field | None = None
        for f in self.method.request_type.fields:
            if f.type_name == FIELD_MASK_TYPE:
                if field_mask is not None:
                    return ""
                field_mask = f

        if field_mask is not None:
            return camel_case(field_mask.name)
        return ""
