"""
Safety Center config parser - validates a raw XML tree into domain objects.

Conversion is fail-fast: the first missing element, invalid element or
unresolvable reference aborts the whole config with a ParseError.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from .models import (
    ID_NULL,
    BuilderInvariantViolation,
    SafetyCenterConfig,
    SafetySource,
    SafetySourcesGroup,
)
from .resources import ResourceTable
from .xml_reader import (
    XmlSafetyCenterConfig,
    XmlSafetySource,
    XmlSafetySourcesGroup,
    read,
)

logger = logging.getLogger(__name__)

# Maximum config file size (1 MB); real configs are a few KB
MAX_FILE_SIZE_BYTES = 1024 * 1024

_STRING_REFERENCE_PREFIX = '@string/'


# ============================================================================
# ERRORS
# ============================================================================

class ParseError(ValueError):
    """Raised when a Safety Center config cannot be parsed or validated."""


class ReadFailure(ParseError):
    """The XML could not be read into a raw tree."""


class MissingElement(ParseError):
    """A required element is absent."""

    def __init__(self, element: str):
        self.element = element
        super().__init__(f"Element {element} missing")


class InvalidElement(ParseError):
    """An element is present but does not validate."""

    def __init__(self, element: str):
        self.element = element
        super().__init__(f"Element {element} invalid")


class NotAReference(ParseError):
    """A value expected to be a ``@string/`` reference is plain text."""

    def __init__(self, reference: str, parent: str, name: str):
        self.reference, self.parent, self.name = reference, parent, name
        super().__init__(f"String {reference} in {parent}.{name} is not a reference")


class ReferenceMissing(ParseError):
    """A ``@string/`` reference does not exist in the resource table."""

    def __init__(self, reference: str, parent: str, name: str):
        self.reference, self.parent, self.name = reference, parent, name
        super().__init__(f"Reference {reference} in {parent}.{name} missing")


# ============================================================================
# ENTRY POINTS
# ============================================================================

def parse(stream: BinaryIO, resource_pkg_name: str,
          resources: ResourceTable) -> SafetyCenterConfig:
    """Parse and validate a Safety Center config XML stream.

    Args:
        stream: binary stream holding the configuration XML
        resource_pkg_name: package containing the configuration's resources
        resources: resource table of that package

    Raises:
        TypeError: if any argument is None.
        ParseError: if the XML cannot be read or does not validate.
    """
    for name, value in (('stream', stream), ('resource_pkg_name', resource_pkg_name),
                        ('resources', resources)):
        if value is None:
            raise TypeError(f"{name} must not be None")
    try:
        raw_config = read(stream)
    except Exception as e:
        raise ReadFailure("Exception while reading XML") from e
    return convert_config(raw_config, resource_pkg_name, resources)


def parse_file(filepath: str, resource_pkg_name: str,
               resources: ResourceTable) -> SafetyCenterConfig:
    """Parse a config file, rejecting files over the size limit."""
    path = Path(filepath)
    file_size = path.stat().st_size
    if file_size > MAX_FILE_SIZE_BYTES:
        raise ValueError(
            f"Config file exceeds maximum size "
            f"({file_size / 1024:.0f} KB > {MAX_FILE_SIZE_BYTES // 1024} KB limit)"
        )
    with path.open('rb') as stream:
        config = parse(stream, resource_pkg_name, resources)
    logger.info("Parsed %s: %d group(s), %d source(s)", filepath,
                len(config.safety_sources_groups), len(config.safety_sources))
    return config


# ============================================================================
# CONVERTERS
# ============================================================================

def convert_config(raw_config: Optional[XmlSafetyCenterConfig], resource_pkg_name: str,
                   resources: ResourceTable) -> SafetyCenterConfig:
    """Convert the raw root element into a SafetyCenterConfig."""
    if raw_config is None:
        raise MissingElement('safety-center-config')
    raw_sources_config = raw_config.safety_sources_config
    if raw_sources_config is None:
        raise MissingElement('safety-sources-config')
    if raw_sources_config.safety_sources_groups is None:
        raise InvalidElement('safety-sources-config')

    builder = SafetyCenterConfig.Builder()
    for raw_group in raw_sources_config.safety_sources_groups:
        builder.add_safety_sources_group(
            convert_sources_group(raw_group, resource_pkg_name, resources))
    try:
        return builder.build()
    except BuilderInvariantViolation as e:
        raise InvalidElement('safety-sources-config') from e


def convert_sources_group(raw_group: Optional[XmlSafetySourcesGroup], resource_pkg_name: str,
                          resources: ResourceTable) -> SafetySourcesGroup:
    """Convert one raw ``safety-sources-group`` element."""
    if raw_group is None:
        raise InvalidElement('safety-sources-group')
    builder = SafetySourcesGroup.Builder()
    builder.set_id(raw_group.id)
    if raw_group.title is not None:
        builder.set_title_res_id(parse_reference(
            raw_group.title, resource_pkg_name, resources, 'safety-sources-group', 'title'))
    if raw_group.summary is not None:
        builder.set_summary_res_id(parse_reference(
            raw_group.summary, resource_pkg_name, resources, 'safety-sources-group', 'summary'))
    if raw_group.stateless_icon_type != 0:
        builder.set_stateless_icon_type(raw_group.stateless_icon_type)
    for raw_source in raw_group.safety_sources:
        builder.add_safety_source(convert_source(raw_source, resource_pkg_name, resources))
    try:
        return builder.build()
    except BuilderInvariantViolation as e:
        raise InvalidElement('safety-sources-group') from e


def convert_source(raw_source: Optional[XmlSafetySource], resource_pkg_name: str,
                   resources: ResourceTable) -> SafetySource:
    """Convert one raw ``safety-source`` element.

    Enum attributes left at 0 keep the builder default. Scalars and booleans
    are always copied; an absent scalar is None.
    """
    if raw_source is None:
        raise InvalidElement('safety-source')
    builder = SafetySource.Builder()
    if raw_source.type != 0:
        builder.set_type(raw_source.type)
    builder.set_id(raw_source.id)
    builder.set_package_name(raw_source.package_name)

    references = (
        ('title', raw_source.title, builder.set_title_res_id),
        ('titleForWork', raw_source.title_for_work, builder.set_title_for_work_res_id),
        ('summary', raw_source.summary, builder.set_summary_res_id),
        ('searchTerms', raw_source.search_terms, builder.set_search_terms_res_id),
    )
    for name, reference, setter in references:
        if reference is not None:
            setter(parse_reference(reference, resource_pkg_name, resources,
                                   'safety-source', name))

    builder.set_intent_action(raw_source.intent_action)
    if raw_source.profile != 0:
        builder.set_profile(raw_source.profile)
    if raw_source.initial_display_state != 0:
        builder.set_initial_display_state(raw_source.initial_display_state)
    builder.set_max_severity_level(raw_source.max_severity_level)
    builder.set_broadcast_receiver_class_name(raw_source.broadcast_receiver_class_name)
    builder.set_disallow_logging(raw_source.disallow_logging)
    builder.set_allow_refresh_on_page_open(raw_source.allow_refresh_on_page_open)
    try:
        return builder.build()
    except BuilderInvariantViolation as e:
        raise InvalidElement('safety-source') from e


def parse_reference(reference: str, resource_pkg_name: str, resources: ResourceTable,
                    parent: str, name: str) -> int:
    """Resolve a ``@string/<entry>`` reference to its resource id.

    ``parent`` and ``name`` identify the element and attribute the reference
    came from, for error messages.
    """
    if not reference.startswith(_STRING_REFERENCE_PREFIX):
        raise NotAReference(reference, parent, name)
    res_id = resources.get_identifier(reference[1:], None, resource_pkg_name)
    if res_id == ID_NULL:
        raise ReferenceMissing(reference, parent, name)
    logger.debug("Resolved %s in %s.%s to %#x", reference, parent, name, res_id)
    return res_id
