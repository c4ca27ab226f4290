"""Plugin parameters passed by protoc as ``--grpc-agent_opt key=value,...``."""

from __future__ import annotations

from dataclasses import dataclass
import re

import voluptuous as vol

from agentgen.const import (
    CONF_AGENT_PACKAGE,
    CONF_ALLOW_PATCH_FEATURE,
    CONF_GENERATE_UNBOUND_METHODS,
    CONF_GOFMT,
    CONF_PATHS,
    CONF_REGISTER_FUNC_SUFFIX,
    CONF_REQUEST_CONTEXT,
    DEFAULT_AGENT_PACKAGE,
    PATHS_IMPORT,
    PATHS_SOURCE_RELATIVE,
)
from agentgen.core import ConfigError

_IDENTIFIER_SUFFIX = re.compile(r"^[A-Za-z0-9_]*$")


def go_identifier_suffix(value):
    value = str(value)
    if not _IDENTIFIER_SUFFIX.match(value):
        raise vol.Invalid(
            f"{value!r} can only contain letters, digits and underscores"
        )
    return value


def go_import_path(value):
    value = str(value).strip()
    if not value or value.startswith("/") or " " in value:
        raise vol.Invalid(f"{value!r} is not a valid Go import path")
    return value


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_REGISTER_FUNC_SUFFIX, default=""): go_identifier_suffix,
        vol.Optional(CONF_REQUEST_CONTEXT, default=True): vol.Boolean(),
        vol.Optional(CONF_ALLOW_PATCH_FEATURE, default=True): vol.Boolean(),
        vol.Optional(CONF_GENERATE_UNBOUND_METHODS, default=False): vol.Boolean(),
        vol.Optional(CONF_PATHS, default=PATHS_IMPORT): vol.In(
            [PATHS_IMPORT, PATHS_SOURCE_RELATIVE]
        ),
        vol.Optional(CONF_AGENT_PACKAGE, default=DEFAULT_AGENT_PACKAGE): go_import_path,
        vol.Optional(CONF_GOFMT, default=False): vol.Boolean(),
    }
)


@dataclass(frozen=True)
class AgentConfig:
    register_func_suffix: str = ""
    # reserved, does not change the generated code yet
    use_request_context: bool = True
    allow_patch_feature: bool = True
    generate_unbound_methods: bool = False
    paths: str = PATHS_IMPORT
    agent_package: str = DEFAULT_AGENT_PACKAGE
    gofmt: bool = False


def parse_parameter_string(parameter: str) -> dict[str, str]:
    """Split ``a=b,c=d`` into a dict. A bare key means ``true``."""
    values: dict[str, str] = {}
    for chunk in parameter.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        key = key.strip()
        if not key:
            continue
        values[key] = value.strip() if sep else "true"
    return values


def load_config(parameter: str) -> AgentConfig:
    try:
        conf = CONFIG_SCHEMA(parse_parameter_string(parameter))
    except vol.Invalid as err:
        raise ConfigError(f"Invalid plugin parameter: {err}") from err

    return AgentConfig(
        register_func_suffix=conf[CONF_REGISTER_FUNC_SUFFIX],
        use_request_context=conf[CONF_REQUEST_CONTEXT],
        allow_patch_feature=conf[CONF_ALLOW_PATCH_FEATURE],
        generate_unbound_methods=conf[CONF_GENERATE_UNBOUND_METHODS],
        paths=conf[CONF_PATHS],
        agent_package=conf[CONF_AGENT_PACKAGE],
        gofmt=conf[CONF_GOFMT],
    )
