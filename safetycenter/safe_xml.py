"""
Safe XML parsing — defused against XXE, billion laughs, and entity expansion.

Every reader in the package goes through these functions so configuration
files are parsed with the same hardening.

Blocks:
- External entity injection (XXE): file:///etc/passwd, http:// callbacks
- Billion laughs / entity expansion: exponential DTD bombs
- DTD retrieval: remote DTD loading
"""

import xml.etree.ElementTree as ET
from typing import BinaryIO, Optional, Union

import defusedxml.ElementTree as _safe_ET


def safe_parse(source: Union[str, BinaryIO]) -> ET.ElementTree:
    """Parse an XML file path or binary stream with XXE protection.

    Returns a standard ElementTree so downstream code is unchanged.
    """
    return _safe_ET.parse(source)


def safe_root_tag(stream: BinaryIO) -> Optional[str]:
    """Return the tag of the root element without reading the rest of the document.

    Comments and processing instructions before the root are skipped. Returns
    None for a document with no element.
    """
    for _event, elem in _safe_ET.iterparse(stream, events=('start',)):
        return elem.tag
    return None
