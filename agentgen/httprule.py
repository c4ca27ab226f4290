"""Minimal reader for google.api.http path templates.

Only the variable names are extracted; segment matching is the runtime's job.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from agentgen.core import DescriptorError

_VARIABLE = re.compile(r"\{([^{}=]*)(?:=([^{}]*))?\}")
_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class PathTemplate:
    template: str
    variables: tuple[str, ...]
    verb: str = ""


def parse_path_template(template: str) -> PathTemplate:
    if not template.startswith("/"):
        raise DescriptorError(f"path template {template!r} must start with '/'")

    path, verb = template, ""
    last_segment = template.rsplit("/", 1)[-1]
    if ":" in last_segment and "}" not in last_segment.rsplit(":", 1)[-1]:
        path, _, verb = template.rpartition(":")

    variables = []
    for match in _VARIABLE.finditer(path):
        name = match.group(1).strip()
        if not _FIELD_PATH.match(name):
            raise DescriptorError(
                f"invalid variable {name!r} in path template {template!r}"
            )
        if name in variables:
            raise DescriptorError(
                f"variable {name!r} bound twice in path template {template!r}"
            )
        variables.append(name)

    stripped = _VARIABLE.sub("", path)
    if "{" in stripped or "}" in stripped:
        raise DescriptorError(f"unbalanced braces in path template {template!r}")

    return PathTemplate(template=template, variables=tuple(variables), verb=verb)
