"""Tests for the raw XML reader."""

import io
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from safetycenter.xml_reader import XmlSafetySource, read

SAMPLE = Path(__file__).parent.parent / "examples" / "safety_center_config.xml"


def _read(body: str):
    return read(io.BytesIO(body.encode("utf-8")))


def _read_source(attrs: str) -> XmlSafetySource:
    raw = _read(
        '<safety-center-config><safety-sources-config>'
        f'<safety-sources-group id="g"><safety-source {attrs}/></safety-sources-group>'
        '</safety-sources-config></safety-center-config>'
    )
    return raw.safety_sources_config.safety_sources_groups[0].safety_sources[0]


def test_read_sample_file():
    raw = read(str(SAMPLE))
    groups = raw.safety_sources_config.safety_sources_groups
    assert [g.id for g in groups] == ["AndroidLockScreenSources", "AndroidPrivacySources"]
    assert groups[1].stateless_icon_type == 2
    assert [s.id for s in groups[1].safety_sources] == [
        "AndroidPermissionManager", "AndroidBackgroundLocation"]


def test_wrong_root_returns_none():
    assert _read("<config/>") is None


def test_missing_sources_config():
    assert _read("<safety-center-config/>").safety_sources_config is None


def test_empty_sources_config_has_empty_group_list():
    raw = _read("<safety-center-config><safety-sources-config/></safety-center-config>")
    assert raw.safety_sources_config.safety_sources_groups == []


def test_unset_attributes_use_binder_defaults():
    source = _read_source('id="s"')
    assert source.type == 0
    assert source.profile == 0
    assert source.initial_display_state == 0
    assert source.package_name is None
    assert source.title is None
    assert source.max_severity_level is None
    assert source.disallow_logging is False


def test_all_source_attributes():
    source = _read_source(
        'type="dynamic" id="s" packageName="com.example" title="@string/t" '
        'titleForWork="@string/tw" summary="@string/s" intentAction="ACTION" '
        'profile="all" initialDisplayState="hidden" maxSeverityLevel="200" '
        'searchTerms="@string/k" broadcastReceiverClassName="com.example.R" '
        'disallowLogging="true" allowRefreshOnPageOpen="1"'
    )
    assert source == XmlSafetySource(
        type=2, id="s", package_name="com.example", title="@string/t",
        title_for_work="@string/tw", summary="@string/s", intent_action="ACTION",
        profile=2, initial_display_state=3, max_severity_level=200,
        search_terms="@string/k", broadcast_receiver_class_name="com.example.R",
        disallow_logging=True, allow_refresh_on_page_open=True,
    )


@pytest.mark.parametrize("value,expected", [
    ("static", 1), ("STATIC", 1), (" issue_only ", 3), ("2", 2), ("7", 7),
])
def test_enum_names_and_integers(value, expected):
    assert _read_source(f'type="{value}"').type == expected


def test_invalid_enum_name():
    with pytest.raises(ValueError, match="Invalid value for attribute type"):
        _read_source('type="sometimes"')


def test_invalid_boolean():
    with pytest.raises(ValueError, match="disallowLogging is not a boolean"):
        _read_source('disallowLogging="yes"')


def test_invalid_integer():
    with pytest.raises(ValueError, match="maxSeverityLevel is not an integer"):
        _read_source('maxSeverityLevel="high"')


def test_unknown_children_ignored():
    raw = _read(
        '<safety-center-config><safety-sources-config>'
        '<comment/><safety-sources-group id="g"><unknown/>'
        '<safety-source id="s"/></safety-sources-group>'
        '</safety-sources-config></safety-center-config>'
    )
    groups = raw.safety_sources_config.safety_sources_groups
    assert len(groups) == 1
    assert len(groups[0].safety_sources) == 1


def test_malformed_xml_raises():
    with pytest.raises(ET.ParseError):
        _read("<safety-center-config><safety-sources-config>")
