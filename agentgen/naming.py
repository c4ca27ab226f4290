"""Render-time views carrying the Go names of services and methods.

Names are title-cased into these views instead of being written back into
the descriptor, so the registry can be rendered any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass

from agentgen.binding import BindingContext
from agentgen.descriptor import Method, Registry, Service
from agentgen.helpers import title_case


@dataclass(frozen=True)
class MethodView:
    method: Method
    name: str
    bindings: tuple[BindingContext, ...]

    @property
    def is_streaming(self) -> bool:
        return self.method.client_streaming or self.method.server_streaming


@dataclass(frozen=True)
class ServiceView:
    service: Service
    name: str
    methods: tuple[MethodView, ...]

    @property
    def has_bindings(self) -> bool:
        return any(m.bindings for m in self.methods)


def normalize_service(
    service: Service, registry: Registry, allow_patch_feature: bool = False
) -> ServiceView:
    methods = tuple(
        MethodView(
            method=meth,
            name=title_case(meth.name),
            bindings=tuple(
                BindingContext(b, registry, allow_patch_feature=allow_patch_feature)
                for b in meth.bindings
            ),
        )
        for meth in service.methods
    )
    return ServiceView(service=service, name=title_case(service.name), methods=methods)
