"""Tests for Safety Center data models — builders, defaults and invariants."""

import dataclasses

import pytest

from safetycenter.models import (
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


def _static(source_id="static1"):
    return (SafetySource.Builder()
            .set_type(SafetySourceType.STATIC)
            .set_id(source_id)
            .set_intent_action("android.settings.SETTINGS"))


def _dynamic(source_id="dynamic1"):
    return (SafetySource.Builder()
            .set_type(SafetySourceType.DYNAMIC)
            .set_id(source_id)
            .set_package_name("com.example")
            .set_intent_action("android.settings.SETTINGS"))


def _issue_only(source_id="issues1"):
    return (SafetySource.Builder()
            .set_type(SafetySourceType.ISSUE_ONLY)
            .set_id(source_id)
            .set_package_name("com.example"))


def _violation(builder):
    with pytest.raises(BuilderInvariantViolation) as exc:
        builder.build()
    return exc.value


class TestSafetySourceBuilder:
    """Per-type rules enforced by SafetySource.Builder.build()."""

    def test_static_defaults(self):
        source = _static().build()
        assert source.type == SafetySourceType.STATIC
        assert source.profile == Profile.PRIMARY
        assert source.initial_display_state == InitialDisplayState.UNSPECIFIED
        assert source.title_res_id == ID_NULL
        assert source.max_severity_level is None
        assert source.disallow_logging is False

    def test_type_required(self):
        err = _violation(SafetySource.Builder().set_id("x"))
        assert (err.entity, err.field) == ("safety-source", "type")

    def test_type_accepts_raw_int(self):
        assert _static().set_type(2).set_package_name("p").build().type == SafetySourceType.DYNAMIC

    def test_unknown_type(self):
        err = _violation(_static().set_type(42))
        assert err.field == "type"
        assert "unknown value 42" in str(err)

    def test_id_required(self):
        assert _violation(_static().set_id("")).field == "id"

    def test_first_violation_reported(self):
        err = _violation(SafetySource.Builder())
        assert err.field == "type"

    @pytest.mark.parametrize("setter,value,field", [
        ("set_broadcast_receiver_class_name", "com.example.Receiver", "broadcastReceiverClassName"),
        ("set_initial_display_state", InitialDisplayState.HIDDEN, "initialDisplayState"),
        ("set_max_severity_level", 100, "maxSeverityLevel"),
        ("set_disallow_logging", True, "disallowLogging"),
        ("set_allow_refresh_on_page_open", True, "allowRefreshOnPageOpen"),
    ])
    def test_static_prohibited_fields(self, setter, value, field):
        builder = _static()
        getattr(builder, setter)(value)
        assert _violation(builder).field == field

    def test_static_requires_intent_action(self):
        assert _violation(_static().set_intent_action(None)).field == "intentAction"

    def test_dynamic_defaults_to_enabled(self):
        assert _dynamic().build().initial_display_state == InitialDisplayState.ENABLED

    def test_dynamic_requires_package(self):
        assert _violation(_dynamic().set_package_name(None)).field == "packageName"

    def test_dynamic_requires_intent_action_unless_hidden(self):
        assert _violation(_dynamic().set_intent_action(None)).field == "intentAction"
        hidden = (_dynamic().set_intent_action(None)
                  .set_initial_display_state(InitialDisplayState.HIDDEN).build())
        assert hidden.intent_action is None

    def test_dynamic_allows_runtime_fields(self):
        source = (_dynamic()
                  .set_broadcast_receiver_class_name("com.example.Receiver")
                  .set_max_severity_level(300)
                  .set_disallow_logging(True)
                  .set_allow_refresh_on_page_open(True)
                  .build())
        assert source.max_severity_level == 300
        assert source.allow_refresh_on_page_open is True

    def test_negative_severity(self):
        assert _violation(_dynamic().set_max_severity_level(-1)).field == "maxSeverityLevel"

    @pytest.mark.parametrize("setter,value,field", [
        ("set_title_res_id", 10, "title"),
        ("set_summary_res_id", 11, "summary"),
        ("set_search_terms_res_id", 12, "searchTerms"),
        ("set_intent_action", "ACTION", "intentAction"),
        ("set_initial_display_state", InitialDisplayState.DISABLED, "initialDisplayState"),
    ])
    def test_issue_only_prohibited_fields(self, setter, value, field):
        builder = _issue_only()
        getattr(builder, setter)(value)
        assert _violation(builder).field == field

    def test_issue_only_requires_package(self):
        assert _violation(_issue_only().set_package_name("")).field == "packageName"

    def test_title_for_work_needs_all_profiles(self):
        builder = _dynamic().set_title_for_work_res_id(99)
        assert _violation(builder).field == "titleForWork"
        assert builder.set_profile(Profile.ALL).build().title_for_work_res_id == 99

    def test_unknown_profile(self):
        assert _violation(_dynamic().set_profile(5)).field == "profile"

    def test_builder_reusable_after_build(self):
        builder = _dynamic()
        first = builder.build()
        second = builder.set_id("dynamic2").build()
        assert first.id == "dynamic1"
        assert second.id == "dynamic2"

    def test_built_source_is_frozen(self):
        source = _static().build()
        with pytest.raises(dataclasses.FrozenInstanceError):
            source.id = "other"

    def test_clone_and_edit(self):
        source = _dynamic().set_title_res_id(5).build()
        edited = SafetySource.Builder(source).set_summary_res_id(6).build()
        assert edited.title_res_id == 5
        assert edited.summary_res_id == 6
        assert source.summary_res_id == ID_NULL

    def test_to_dict(self):
        data = _issue_only().set_profile(Profile.ALL).build().to_dict()
        assert data["type"] == "issue_only"
        assert data["profile"] == "all"
        assert data["package_name"] == "com.example"


class TestSafetySourcesGroupBuilder:
    def test_defaults(self):
        group = SafetySourcesGroup.Builder().set_id("g").add_safety_source(_static().build()).build()
        assert group.stateless_icon_type == StatelessIconType.NONE
        assert group.title_res_id == ID_NULL
        assert isinstance(group.safety_sources, tuple)

    def test_id_required(self):
        builder = SafetySourcesGroup.Builder().add_safety_source(_static().build())
        err = _violation(builder)
        assert (err.entity, err.field) == ("safety-sources-group", "id")

    def test_sources_required(self):
        assert _violation(SafetySourcesGroup.Builder().set_id("g")).field == "safety-source"

    def test_unknown_icon_type(self):
        builder = (SafetySourcesGroup.Builder().set_id("g")
                   .set_stateless_icon_type(3).add_safety_source(_static().build()))
        assert _violation(builder).field == "statelessIconType"

    def test_copy_on_build(self):
        builder = SafetySourcesGroup.Builder().set_id("g").add_safety_source(_static("a").build())
        first = builder.build()
        builder.add_safety_source(_static("b").build())
        assert len(first.safety_sources) == 1
        assert len(builder.build().safety_sources) == 2

    def test_clone_preserves_order(self):
        group = (SafetySourcesGroup.Builder().set_id("g")
                 .add_safety_source(_static("b").build())
                 .add_safety_source(_static("a").build())
                 .build())
        clone = SafetySourcesGroup.Builder(group).build()
        assert clone == group
        assert [s.id for s in clone.safety_sources] == ["b", "a"]


class TestSafetyCenterConfig:
    def _group(self, group_id, *source_ids):
        builder = SafetySourcesGroup.Builder().set_id(group_id)
        for source_id in source_ids:
            builder.add_safety_source(_static(source_id).build())
        return builder.build()

    def test_groups_required(self):
        err = _violation(SafetyCenterConfig.Builder())
        assert err.entity == "safety-sources-config"

    def test_flattened_sources(self):
        config = (SafetyCenterConfig.Builder()
                  .add_safety_sources_group(self._group("g1", "a", "b"))
                  .add_safety_sources_group(self._group("g2", "c"))
                  .build())
        assert [s.id for s in config.safety_sources] == ["a", "b", "c"]

    def test_find(self):
        config = SafetyCenterConfig.Builder().add_safety_sources_group(self._group("g1", "a")).build()
        assert config.find_group("g1").id == "g1"
        assert config.find_group("nope") is None
        assert config.find_source("a").id == "a"
        assert config.find_source("nope") is None

    def test_duplicate_ids_not_rejected(self):
        config = (SafetyCenterConfig.Builder()
                  .add_safety_sources_group(self._group("g", "a"))
                  .add_safety_sources_group(self._group("g", "a"))
                  .build())
        assert len(config.safety_sources_groups) == 2

    def test_to_dict(self):
        config = SafetyCenterConfig.Builder().add_safety_sources_group(self._group("g1", "a")).build()
        data = config.to_dict()
        assert data["safety_sources_groups"][0]["id"] == "g1"
        assert data["safety_sources_groups"][0]["stateless_icon_type"] == "none"
        assert data["safety_sources_groups"][0]["safety_sources"][0]["id"] == "a"
