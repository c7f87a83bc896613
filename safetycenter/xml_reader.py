"""
Raw reader for Safety Center configuration XML.

Binds the document to loosely-typed objects without validating it, in the
manner of a schema-generated binder: enum attributes default to ``0``
(unset), strings to ``None`` and booleans to ``False``. Validation and
reference resolution happen later in :mod:`safetycenter.parser`.

Expected layout::

    <safety-center-config>
      <safety-sources-config>
        <safety-sources-group id="..." title="@string/..." statelessIconType="privacy">
          <safety-source type="dynamic" id="..." packageName="..." .../>
        </safety-sources-group>
      </safety-sources-config>
    </safety-center-config>
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Union

from .safe_xml import safe_parse

# Symbolic names accepted for enum attributes, mapped to their raw values
_SOURCE_TYPES = {'static': 1, 'dynamic': 2, 'issue_only': 3}
_PROFILES = {'primary': 1, 'all': 2}
_DISPLAY_STATES = {'enabled': 1, 'disabled': 2, 'hidden': 3}
_ICON_TYPES = {'none': 1, 'privacy': 2}

_BOOLEANS = {'true': True, '1': True, 'false': False, '0': False}


@dataclass
class XmlSafetySource:
    type: int = 0
    id: Optional[str] = None
    package_name: Optional[str] = None
    title: Optional[str] = None
    title_for_work: Optional[str] = None
    summary: Optional[str] = None
    intent_action: Optional[str] = None
    profile: int = 0
    initial_display_state: int = 0
    max_severity_level: Optional[int] = None
    search_terms: Optional[str] = None
    broadcast_receiver_class_name: Optional[str] = None
    disallow_logging: bool = False
    allow_refresh_on_page_open: bool = False


@dataclass
class XmlSafetySourcesGroup:
    id: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    stateless_icon_type: int = 0
    safety_sources: List[Optional[XmlSafetySource]] = field(default_factory=list)


@dataclass
class XmlSafetySourcesConfig:
    # None models a structurally malformed element, distinct from an empty list
    safety_sources_groups: Optional[List[Optional[XmlSafetySourcesGroup]]] = field(
        default_factory=list)


@dataclass
class XmlSafetyCenterConfig:
    safety_sources_config: Optional[XmlSafetySourcesConfig] = None


def read(stream: Union[str, BinaryIO]) -> Optional[XmlSafetyCenterConfig]:
    """Read a configuration document from a path or binary stream.

    Returns None when the root element is not ``safety-center-config``.

    Raises:
        xml.etree.ElementTree.ParseError: for malformed XML.
        defusedxml.DefusedXmlException: for documents using DTDs or entities.
        ValueError: for attribute values of the wrong shape.
    """
    root = safe_parse(stream).getroot()
    if root.tag != 'safety-center-config':
        return None
    return _read_config(root)


def _read_config(elem: ET.Element) -> XmlSafetyCenterConfig:
    sources_config = elem.find('safety-sources-config')
    if sources_config is None:
        return XmlSafetyCenterConfig()
    groups = [_read_group(g) for g in sources_config.findall('safety-sources-group')]
    return XmlSafetyCenterConfig(
        safety_sources_config=XmlSafetySourcesConfig(safety_sources_groups=groups))


def _read_group(elem: ET.Element) -> XmlSafetySourcesGroup:
    return XmlSafetySourcesGroup(
        id=elem.get('id'),
        title=elem.get('title'),
        summary=elem.get('summary'),
        stateless_icon_type=_enum_attr(elem, 'statelessIconType', _ICON_TYPES),
        safety_sources=[_read_source(s) for s in elem.findall('safety-source')],
    )


def _read_source(elem: ET.Element) -> XmlSafetySource:
    max_severity = elem.get('maxSeverityLevel')
    return XmlSafetySource(
        type=_enum_attr(elem, 'type', _SOURCE_TYPES),
        id=elem.get('id'),
        package_name=elem.get('packageName'),
        title=elem.get('title'),
        title_for_work=elem.get('titleForWork'),
        summary=elem.get('summary'),
        intent_action=elem.get('intentAction'),
        profile=_enum_attr(elem, 'profile', _PROFILES),
        initial_display_state=_enum_attr(elem, 'initialDisplayState', _DISPLAY_STATES),
        max_severity_level=_int_value(max_severity, 'maxSeverityLevel')
        if max_severity is not None else None,
        search_terms=elem.get('searchTerms'),
        broadcast_receiver_class_name=elem.get('broadcastReceiverClassName'),
        disallow_logging=_bool_attr(elem, 'disallowLogging'),
        allow_refresh_on_page_open=_bool_attr(elem, 'allowRefreshOnPageOpen'),
    )


def _int_value(text: str, name: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise ValueError(f"Attribute {name} is not an integer: '{text}'")


def _enum_attr(elem: ET.Element, name: str, names: Dict[str, int]) -> int:
    """Read an enum attribute given either as an integer or a symbolic name."""
    text = elem.get(name)
    if text is None:
        return 0
    token = text.strip().lower()
    if token in names:
        return names[token]
    if token.lstrip('-').isdigit():
        return int(token)
    raise ValueError(
        f"Invalid value for attribute {name}: '{text}'. "
        f"Valid names: {', '.join(names)}"
    )


def _bool_attr(elem: ET.Element, name: str) -> bool:
    text = elem.get(name)
    if text is None:
        return False
    try:
        return _BOOLEANS[text.strip().lower()]
    except KeyError:
        raise ValueError(f"Attribute {name} is not a boolean: '{text}'")
