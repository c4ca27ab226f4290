"""Descriptor model the generator works on.

The registry wraps the ``FileDescriptorProto`` messages protoc hands to the
plugin, resolves type names across files and turns ``google.api.http``
annotations into bindings. Nothing in the model is mutated after loading.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
import posixpath

from google.api import annotations_pb2, http_pb2
from google.protobuf import descriptor_pb2
from google.protobuf.descriptor_pb2 import FieldDescriptorProto

from agentgen.core import DescriptorError
from agentgen.helpers import go_quote, sanitize_package_name
from agentgen.httprule import PathTemplate, parse_path_template

_LOGGER = logging.getLogger(__name__)


@dataclass(eq=False)
class GoPackage:
    path: str
    name: str
    alias: str = ""
    standard: bool = False

    def __str__(self) -> str:
        if not self.alias:
            return go_quote(self.path)
        return f"{self.alias} {go_quote(self.path)}"


@dataclass(eq=False)
class File:
    proto: descriptor_pb2.FileDescriptorProto
    go_pkg: GoPackage
    messages: list[Message] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def package(self) -> str:
        return self.proto.package


def _qualified_name(package: str, outers: Iterable[str], name: str) -> str:
    return "." + ".".join(part for part in (package, *outers, name) if part)


@dataclass(eq=False)
class Message:
    file: File
    proto: descriptor_pb2.DescriptorProto
    outers: tuple[str, ...] = ()
    fields: list[Field] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def fqmn(self) -> str:
        """Fully qualified message name, with a leading dot."""
        return _qualified_name(self.file.package, self.outers, self.name)

    def find_field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def go_type(
        self, current_package: str, aliases: Mapping[str, str] | None = None
    ) -> str:
        """Go type expression of the message as seen from ``current_package``.

        ``aliases`` maps import paths to the identifier they were imported
        under when that differs from the package name.
        """
        name = "_".join((*self.outers, self.name))
        go_pkg = self.file.go_pkg
        if go_pkg.path == current_package:
            return name
        pkg = (aliases or {}).get(go_pkg.path) or go_pkg.alias or go_pkg.name
        return f"{pkg}.{name}"


@dataclass(eq=False)
class Enum:
    file: File
    proto: descriptor_pb2.EnumDescriptorProto
    outers: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def fqen(self) -> str:
        return _qualified_name(self.file.package, self.outers, self.name)


@dataclass(eq=False)
class Field:
    message: Message
    proto: FieldDescriptorProto

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def type_name(self) -> str:
        return self.proto.type_name

    @property
    def is_enum(self) -> bool:
        return self.proto.type == FieldDescriptorProto.TYPE_ENUM

    @property
    def is_message(self) -> bool:
        return self.proto.type == FieldDescriptorProto.TYPE_MESSAGE

    @property
    def is_repeated(self) -> bool:
        return self.proto.label == FieldDescriptorProto.LABEL_REPEATED


@dataclass(frozen=True)
class FieldPathComponent:
    name: str
    target: Field


@dataclass(frozen=True)
class FieldPath:
    components: tuple[FieldPathComponent, ...] = ()

    def __str__(self) -> str:
        return ".".join(c.name for c in self.components)

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self):
        return iter(self.components)


@dataclass(eq=False)
class Parameter:
    """A path parameter of a binding."""

    field_path: FieldPath
    target: Field
    method: Method

    @property
    def is_enum(self) -> bool:
        return self.target.is_enum

    @property
    def is_repeated(self) -> bool:
        return self.target.is_repeated


@dataclass(eq=False)
class Body:
    field_path: FieldPath


@dataclass(eq=False)
class Binding:
    method: Method
    index: int
    http_method: str
    path_template: PathTemplate
    path_params: list[Parameter] = field(default_factory=list)
    body: Body | None = None


@dataclass(eq=False)
class Method:
    service: Service
    proto: descriptor_pb2.MethodDescriptorProto
    request_type: Message
    response_type: Message
    bindings: list[Binding] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def client_streaming(self) -> bool:
        return self.proto.client_streaming

    @property
    def server_streaming(self) -> bool:
        return self.proto.server_streaming


@dataclass(eq=False)
class Service:
    file: File
    proto: descriptor_pb2.ServiceDescriptorProto
    methods: list[Method] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.proto.name

    @property
    def fqsn(self) -> str:
        return _qualified_name(self.file.package, (), self.name)


def go_package_for(file_proto: descriptor_pb2.FileDescriptorProto) -> GoPackage:
    """Derive the Go import path and package name of a proto file."""
    go_package = file_proto.options.go_package
    import_path, _, explicit_name = go_package.partition(";")

    if "/" in import_path:
        path = import_path
    else:
        path = posixpath.dirname(file_proto.name)

    if explicit_name:
        name = explicit_name
    elif go_package:
        name = import_path.rsplit("/", 1)[-1]
    elif file_proto.package:
        name = file_proto.package
    else:
        name = posixpath.splitext(posixpath.basename(file_proto.name))[0]

    return GoPackage(path=path, name=sanitize_package_name(name))


def _rule_pattern(rule: http_pb2.HttpRule) -> tuple[str, str]:
    kind = rule.WhichOneof("pattern")
    if kind is None:
        raise DescriptorError("none of pattern specified in http rule")
    if kind == "custom":
        return rule.custom.kind, rule.custom.path
    return kind.upper(), getattr(rule, kind)


class Registry:
    """All messages, enums and services of a code generation request."""

    def __init__(self, *, generate_unbound_methods: bool = False) -> None:
        self.generate_unbound_methods = generate_unbound_methods
        self._files: dict[str, File] = {}
        self._messages: dict[str, Message] = {}
        self._enums: dict[str, Enum] = {}

    def load_files(
        self, file_protos: Iterable[descriptor_pb2.FileDescriptorProto]
    ) -> None:
        file_protos = list(file_protos)
        for file_proto in file_protos:
            self._load_file(file_proto)
        # services are resolved once every message of the request is known
        for file_proto in file_protos:
            self._load_services(self._files[file_proto.name])

    def _load_file(self, file_proto: descriptor_pb2.FileDescriptorProto) -> None:
        file = File(proto=file_proto, go_pkg=go_package_for(file_proto))
        self._register_messages(file, (), file_proto.message_type)
        self._register_enums(file, (), file_proto.enum_type)
        self._files[file.name] = file
        _LOGGER.debug("Registered file %s (go package %s)", file.name, file.go_pkg)

    def _register_messages(
        self,
        file: File,
        outers: tuple[str, ...],
        protos: Iterable[descriptor_pb2.DescriptorProto],
    ) -> None:
        for proto in protos:
            msg = Message(file=file, proto=proto, outers=outers)
            msg.fields = [Field(message=msg, proto=f) for f in proto.field]
            file.messages.append(msg)
            self._messages[msg.fqmn] = msg

            nested = (*outers, proto.name)
            self._register_messages(file, nested, proto.nested_type)
            self._register_enums(file, nested, proto.enum_type)

    def _register_enums(
        self,
        file: File,
        outers: tuple[str, ...],
        protos: Iterable[descriptor_pb2.EnumDescriptorProto],
    ) -> None:
        for proto in protos:
            enum = Enum(file=file, proto=proto, outers=outers)
            file.enums.append(enum)
            self._enums[enum.fqen] = enum

    def _load_services(self, file: File) -> None:
        for svc_proto in file.proto.service:
            svc = Service(file=file, proto=svc_proto)
            for meth_proto in svc_proto.method:
                meth = Method(
                    service=svc,
                    proto=meth_proto,
                    request_type=self.lookup_msg(file.package, meth_proto.input_type),
                    response_type=self.lookup_msg(
                        file.package, meth_proto.output_type
                    ),
                )
                meth.bindings = self._new_bindings(meth)
                svc.methods.append(meth)
            file.services.append(svc)

    def _new_bindings(self, method: Method) -> list[Binding]:
        options = method.proto.options
        if options.HasExtension(annotations_pb2.http):
            primary = options.Extensions[annotations_pb2.http]
            rules = [primary, *primary.additional_bindings]
        elif self.generate_unbound_methods:
            rules = [
                http_pb2.HttpRule(
                    post=f"/{method.service.fqsn[1:]}/{method.name}", body="*"
                )
            ]
        else:
            return []

        bindings = []
        for index, rule in enumerate(rules):
            if index > 0 and rule.additional_bindings:
                raise DescriptorError(
                    f"{method.service.name}.{method.name}: additional_binding "
                    "cannot have additional_bindings"
                )
            try:
                http_method, template = _rule_pattern(rule)
                path_template = parse_path_template(template)
            except DescriptorError as err:
                raise DescriptorError(
                    f"{method.service.name}.{method.name}: {err}"
                ) from err

            binding = Binding(
                method=method,
                index=index,
                http_method=http_method,
                path_template=path_template,
            )
            for variable in path_template.variables:
                path = self.resolve_field_path(method.request_type, variable)
                binding.path_params.append(
                    Parameter(
                        field_path=path,
                        target=path.components[-1].target,
                        method=method,
                    )
                )
            if rule.body:
                body_path = "" if rule.body == "*" else rule.body
                binding.body = Body(
                    field_path=self.resolve_field_path(method.request_type, body_path)
                )
            bindings.append(binding)
        return bindings

    def resolve_field_path(self, msg: Message, path: str) -> FieldPath:
        """Resolve a dotted field path starting at ``msg``."""
        if not path:
            return FieldPath()

        names = path.split(".")
        components = []
        current: Message | None = msg
        for i, name in enumerate(names):
            if current is None:
                raise DescriptorError(
                    f"{path}: {components[-1].name} is not a message field"
                )
            target = current.find_field(name)
            if target is None:
                raise DescriptorError(f"no field {name!r} found in {current.fqmn}")
            components.append(FieldPathComponent(name=name, target=target))

            if i < len(names) - 1:
                if target.is_repeated:
                    raise DescriptorError(
                        f"{path}: repeated field {name!r} cannot be traversed"
                    )
                current = (
                    self.lookup_msg(current.fqmn[1:], target.type_name)
                    if target.is_message
                    else None
                )
        return FieldPath(components=tuple(components))

    @staticmethod
    def _candidates(location: str, name: str) -> list[str]:
        if name.startswith("."):
            return [name]
        scope = location.split(".") if location else []
        candidates = []
        while scope:
            candidates.append("." + ".".join((*scope, name)))
            scope.pop()
        candidates.append("." + name)
        return candidates

    def lookup_msg(self, location: str, name: str) -> Message:
        for candidate in self._candidates(location, name):
            if candidate in self._messages:
                return self._messages[candidate]
        raise DescriptorError(f"no message found: {name}")

    def lookup_enum(self, location: str, name: str) -> Enum:
        for candidate in self._candidates(location, name):
            if candidate in self._enums:
                return self._enums[candidate]
        raise DescriptorError(f"no enum found: {name}")

    def lookup_file(self, name: str) -> File:
        try:
            return self._files[name]
        except KeyError as err:
            raise DescriptorError(f"no such file given: {name}") from err
