"""Render the agent source for the files of a code generation request."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cache
import logging
import posixpath
import shutil
import subprocess

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from agentgen.const import (
    EXTERNAL_IMPORTS,
    GENERATED_FILE_SUFFIX,
    PATHS_SOURCE_RELATIVE,
    STANDARD_IMPORTS,
)
from agentgen.core import NoTargetServiceError, TemplateRenderError
from agentgen.core.config import AgentConfig
from agentgen.descriptor import File, GoPackage, Registry
from agentgen.helpers import ensure_unique_string, go_quote
from agentgen.naming import ServiceView, normalize_service

_LOGGER = logging.getLogger(__name__)


@cache
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("agentgen", "templates"),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["go_quote"] = go_quote
    return env


def render_template(name: str, **context) -> str:
    try:
        return get_environment().get_template(name).render(**context)
    except TemplateError as err:
        raise TemplateRenderError(f"Failed to render {name}: {err}") from err


@dataclass
class TemplateParams:
    file: File
    imports: list[GoPackage]
    aliases: dict[str, str] = field(default_factory=dict)
    use_request_context: bool = True
    register_func_suffix: str = ""
    allow_patch_feature: bool = False


@dataclass
class GeneratedUnit:
    """Source text of one file while it is being rendered."""

    source: str
    code: str = ""
    services: list[ServiceView] = field(default_factory=list)

    def ensure_targets(self) -> None:
        if not self.services:
            raise NoTargetServiceError(self.source)


def apply_template(params: TemplateParams, registry: Registry) -> str:
    file = params.file
    unit = GeneratedUnit(source=file.name)
    unit.code += render_template(
        "header.go.j2", file=file, imports=params.imports
    )

    for service in file.services:
        view = normalize_service(
            service, registry, allow_patch_feature=params.allow_patch_feature
        )
        for method in view.methods:
            _LOGGER.debug("Processing %s.%s", view.name, method.name)
            request_type = method.method.request_type.go_type(
                file.go_pkg.path, params.aliases
            )
            for binding in method.bindings:
                unit.code += render_template(
                    "handler.go.j2",
                    service=view,
                    method=method,
                    binding=binding,
                    request_type=request_type,
                )
        if view.has_bindings:
            unit.services.append(view)

    unit.ensure_targets()

    unit.code += render_template(
        "trailer.go.j2",
        services=unit.services,
        use_request_context=params.use_request_context,
        register_func_suffix=params.register_func_suffix,
    )
    return unit.code


def format_source(code: str, source: str) -> str:
    """Run the code through gofmt when it is installed."""
    gofmt = shutil.which("gofmt")
    if gofmt is None:
        _LOGGER.warning("gofmt not found, %s is left unformatted", source)
        return code
    result = subprocess.run(
        [gofmt], input=code, capture_output=True, text=True, check=False
    )
    if result.returncode != 0:
        raise TemplateRenderError(
            f"{source}: generated code is not valid Go: {result.stderr.strip()}"
        )
    return result.stdout


@dataclass(frozen=True)
class GeneratedFile:
    name: str
    content: str


class Generator:
    def __init__(self, registry: Registry, config: AgentConfig) -> None:
        self.registry = registry
        self.config = config

    def generate(self, targets: list[File]) -> list[GeneratedFile]:
        files = []
        for file in targets:
            try:
                code = self._generate(file)
            except NoTargetServiceError as err:
                _LOGGER.info("Skipping %s", err)
                continue
            files.append(GeneratedFile(name=self.output_name(file), content=code))
        return files

    def _generate(self, file: File) -> str:
        imports, aliases = self.imports_for(file)
        params = TemplateParams(
            file=file,
            imports=imports,
            aliases=aliases,
            use_request_context=self.config.use_request_context,
            register_func_suffix=self.config.register_func_suffix,
            allow_patch_feature=self.config.allow_patch_feature,
        )
        code = apply_template(params, self.registry)
        if self.config.gofmt:
            code = format_source(code, file.name)
        return code

    def imports_for(self, file: File) -> tuple[list[GoPackage], dict[str, str]]:
        """Default imports plus the packages of requests defined elsewhere.

        Returns the import list and the aliases given to packages whose name
        clashed with an earlier import.
        """
        imports = [
            GoPackage(path=path, name=path.rsplit("/", 1)[-1], standard=True)
            for path in STANDARD_IMPORTS
        ]
        imports += [
            GoPackage(path=path, name=path.rsplit("/", 1)[-1])
            for path in (*EXTERNAL_IMPORTS, self.config.agent_package)
        ]

        seen_paths = {pkg.path for pkg in imports}
        taken_names = {pkg.name for pkg in imports}
        aliases: dict[str, str] = {}
        for svc in file.services:
            for meth in svc.methods:
                pkg = meth.request_type.file.go_pkg
                if (
                    not meth.bindings
                    or pkg.path == file.go_pkg.path
                    or pkg.path in seen_paths
                ):
                    continue
                seen_paths.add(pkg.path)
                name = ensure_unique_string(pkg.name, taken_names)
                taken_names.add(name)
                alias = ""
                if name != pkg.name:
                    alias = name
                    aliases[pkg.path] = alias
                imports.append(GoPackage(path=pkg.path, name=pkg.name, alias=alias))
        return imports, aliases

    def output_name(self, file: File) -> str:
        base = posixpath.splitext(file.name)[0] + GENERATED_FILE_SUFFIX
        if self.config.paths == PATHS_SOURCE_RELATIVE or not file.go_pkg.path:
            return base
        return posixpath.join(file.go_pkg.path, posixpath.basename(base))
