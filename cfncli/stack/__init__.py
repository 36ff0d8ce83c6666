"""Stack domain: requests, policies, outcomes and option processing."""

from .errors import ConfigurationError, ContentResolutionError, OptionError
from .model import (
    ApplyOptions,
    Cancelled,
    Capability,
    DeploymentOutcome,
    Failed,
    NoOpDetected,
    OnFailure,
    Parameter,
    PollingPolicy,
    StackRequest,
    Succeeded,
    Tag,
    TimedOut,
)
from .options import process_options

__all__ = [
    "ApplyOptions",
    "Cancelled",
    "Capability",
    "ConfigurationError",
    "ContentResolutionError",
    "DeploymentOutcome",
    "Failed",
    "NoOpDetected",
    "OnFailure",
    "OptionError",
    "Parameter",
    "PollingPolicy",
    "StackRequest",
    "Succeeded",
    "Tag",
    "TimedOut",
    "process_options",
]
