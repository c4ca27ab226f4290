"""Constants used by agentgen."""

__version__ = "0.3.0"

PLUGIN_NAME = "protoc-gen-grpc-agent"
GENERATED_FILE_SUFFIX = ".pb.agent.go"

ENV_LOG_LEVEL = "AGENTGEN_LOG_LEVEL"
ENV_VERBOSE = "AGENTGEN_VERBOSE"

CONF_AGENT_PACKAGE = "agent_package"
CONF_ALLOW_PATCH_FEATURE = "allow_patch_feature"
CONF_GENERATE_UNBOUND_METHODS = "generate_unbound_methods"
CONF_GOFMT = "gofmt"
CONF_PATHS = "paths"
CONF_REGISTER_FUNC_SUFFIX = "register_func_suffix"
CONF_REQUEST_CONTEXT = "request_context"

PATHS_IMPORT = "import"
PATHS_SOURCE_RELATIVE = "source_relative"

DEFAULT_AGENT_PACKAGE = "github.com/grpc-agent/grpcagent"

# Body path meaning "the entire request message is the body".
BODY_WILDCARD = "*"
FIELD_MASK_TYPE = ".google.protobuf.FieldMask"

STANDARD_IMPORTS = (
    "context",
    "encoding/json",
    "errors",
    "io",
)
EXTERNAL_IMPORTS = (
    "github.com/golang/protobuf/proto",
    "github.com/grpc-ecosystem/grpc-gateway/runtime",
    "github.com/grpc-ecosystem/grpc-gateway/utilities",
    "google.golang.org/grpc",
    "google.golang.org/grpc/codes",
    "google.golang.org/grpc/metadata",
    "google.golang.org/grpc/status",
)
