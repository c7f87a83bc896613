"""
safetycenter - Python library for parsing and validating Safety Center configs.

This package provides tools to:
- Read Safety Center configuration XML into a raw tree
- Validate it into immutable SafetyCenterConfig / SafetySourcesGroup /
  SafetySource objects
- Resolve @string/ references against a resource table
"""

from .models import (
    ID_NULL,
    BuilderInvariantViolation,
    InitialDisplayState,
    Profile,
    SafetyCenterConfig,
    SafetySource,
    SafetySourcesGroup,
    SafetySourceType,
    StatelessIconType,
)
from .parser import (
    InvalidElement,
    MissingElement,
    NotAReference,
    ParseError,
    ReadFailure,
    ReferenceMissing,
    convert_config,
    convert_source,
    convert_sources_group,
    parse,
    parse_file,
    parse_reference,
)
from .resources import MappingResourceTable, ResourceTable, load_resource_table

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",

    # Enums
    "SafetySourceType",
    "Profile",
    "InitialDisplayState",
    "StatelessIconType",

    # Models
    "ID_NULL",
    "SafetyCenterConfig",
    "SafetySourcesGroup",
    "SafetySource",
    "BuilderInvariantViolation",

    # Parser
    "parse",
    "parse_file",
    "convert_config",
    "convert_sources_group",
    "convert_source",
    "parse_reference",

    # Errors
    "ParseError",
    "ReadFailure",
    "MissingElement",
    "InvalidElement",
    "NotAReference",
    "ReferenceMissing",

    # Resources
    "ResourceTable",
    "MappingResourceTable",
    "load_resource_table",
]
