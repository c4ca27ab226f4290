class AgentGenError(Exception):
    """General agentgen exception occurred."""


class NoTargetServiceError(AgentGenError):
    """No service of the file has a method with a binding."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"{file_name}: no target service defined in the file")
        self.file_name = file_name


class TemplateRenderError(AgentGenError):
    """A template could not be rendered."""


class DescriptorError(AgentGenError):
    """The descriptor set references something that cannot be resolved."""


class ConfigError(AgentGenError):
    """The plugin parameters are invalid."""
