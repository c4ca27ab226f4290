"""
agentgen unit tests
~~~~~~~~~~~~~~~~~~~

Configuration file for unit tests.

If adding unit tests ensure that they are fast. Descriptors are built in
memory, protoc is never invoked.

"""

from collections.abc import Callable
from pathlib import Path
import sys

import pytest

here = Path(__file__).parent

# Configure location of package root
package_root = here.parent.parent
sys.path.insert(0, package_root.as_posix())

from agentgen.descriptor import Registry  # noqa: E402

from proto_builders import echo_file  # noqa: E402


@pytest.fixture
def make_registry() -> Callable[..., Registry]:
    """Factory fixture loading file protos into a fresh registry."""

    def _create(*file_protos, generate_unbound_methods: bool = False) -> Registry:
        registry = Registry(generate_unbound_methods=generate_unbound_methods)
        registry.load_files(file_protos)
        return registry

    return _create


@pytest.fixture
def echo_registry(make_registry) -> Registry:
    return make_registry(echo_file())
