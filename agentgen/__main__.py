# PYTHON_ARGCOMPLETE_OK
"""protoc plugin entry point.

protoc writes a serialized CodeGeneratorRequest to stdin and reads a
CodeGeneratorResponse from stdout. Generation failures are reported through
the response's ``error`` field, as the plugin protocol requires.
"""

import argparse
import logging
import os
import sys
from typing import BinaryIO

import argcomplete
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from agentgen import const
from agentgen.core import AgentGenError
from agentgen.core.config import load_config
from agentgen.descriptor import Registry
from agentgen.generator import Generator
from agentgen.helpers import get_bool_env
from agentgen.log import setup_log

_LOGGER = logging.getLogger(__name__)


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog=const.PLUGIN_NAME,
        description=(
            f"{const.PLUGIN_NAME} {const.__version__}. Reads a "
            "CodeGeneratorRequest on stdin and writes a CodeGeneratorResponse "
            "on stdout."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Enable verbose logs.",
        action="store_true",
        default=get_bool_env(const.ENV_VERBOSE),
    )
    parser.add_argument(
        "-q", "--quiet", help="Disable all logs.", action="store_true"
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help="Set the log level.",
        default=os.getenv(const.ENV_LOG_LEVEL, "INFO"),
        action="store",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Version: {const.__version__}",
        help="Print the plugin version and exit.",
    )

    argcomplete.autocomplete(parser)
    return parser.parse_args(argv[1:])


def generate_code(
    request: plugin_pb2.CodeGeneratorRequest,
) -> plugin_pb2.CodeGeneratorResponse:
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = (
        plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    )

    try:
        config = load_config(request.parameter)
        registry = Registry(generate_unbound_methods=config.generate_unbound_methods)
        registry.load_files(request.proto_file)
        targets = [registry.lookup_file(name) for name in request.file_to_generate]
        generated = Generator(registry, config).generate(targets)
    except AgentGenError as err:
        _LOGGER.error(err)
        response.error = str(err)
        return response

    for gen_file in generated:
        out = response.file.add()
        out.name = gen_file.name
        out.content = gen_file.content
    _LOGGER.debug("Generated %d file(s)", len(generated))
    return response


def run_agentgen(argv, stdin: BinaryIO, stdout: BinaryIO) -> int:
    args = parse_args(argv)
    if args.verbose:
        args.log_level = "DEBUG"
    elif args.quiet:
        args.log_level = "CRITICAL"
    setup_log(log_level=args.log_level)

    try:
        request = plugin_pb2.CodeGeneratorRequest.FromString(stdin.read())
    except DecodeError as err:
        _LOGGER.error("Could not parse CodeGeneratorRequest: %s", err)
        return 1

    response = generate_code(request)
    stdout.write(response.SerializeToString())
    stdout.flush()
    return 0


def main():
    try:
        return run_agentgen(sys.argv, sys.stdin.buffer, sys.stdout.buffer)
    except KeyboardInterrupt:
        return 1


if __name__ == "__main__":
    sys.exit(main())
