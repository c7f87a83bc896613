"""
Data models for the Safety Center configuration.

Provides immutable entities for the configuration tree along with the
builders that validate them:

    SafetyCenterConfig
      └── SafetySourcesGroup (one or more)
            └── SafetySource (one or more)

Entities are frozen once built. Each builder can be pre-populated from an
existing instance to clone-and-edit it.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

# Resource identifier meaning "no resource"
ID_NULL = 0


# ============================================================================
# ENUMS
# ============================================================================

class SafetySourceType(IntEnum):
    """Kinds of safety sources."""
    UNSPECIFIED = 0
    STATIC = 1      # Fixed entry, never updated at runtime
    DYNAMIC = 2     # Entry whose state is pushed by the owning package
    ISSUE_ONLY = 3  # Contributes issues only, no entry of its own


class Profile(IntEnum):
    """Profiles a safety source is shown for."""
    UNSPECIFIED = 0
    PRIMARY = 1
    ALL = 2


class InitialDisplayState(IntEnum):
    """How a dynamic source is displayed before it provides any data."""
    UNSPECIFIED = 0
    ENABLED = 1
    DISABLED = 2
    HIDDEN = 3


class StatelessIconType(IntEnum):
    """Icon shown for a group when it has no status."""
    UNSPECIFIED = 0
    NONE = 1
    PRIVACY = 2


EnumValue = Union[int, IntEnum]


class BuilderInvariantViolation(ValueError):
    """Raised by a builder when the accumulated fields do not form a valid entity."""

    def __init__(self, entity: str, field: str, reason: str):
        self.entity = entity
        self.field = field
        self.reason = reason
        super().__init__(f"{entity}.{field}: {reason}")


def _coerce(enum_cls, value: EnumValue, entity: str, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise BuilderInvariantViolation(entity, field, f"unknown value {value!r}")


def _require(condition: bool, entity: str, field: str, reason: str) -> None:
    if not condition:
        raise BuilderInvariantViolation(entity, field, reason)


# ============================================================================
# SAFETY SOURCE
# ============================================================================

@dataclass(frozen=True)
class SafetySource:
    """A single safety-relevant data provider."""
    type: SafetySourceType
    id: str
    package_name: Optional[str] = None
    title_res_id: int = ID_NULL
    title_for_work_res_id: int = ID_NULL
    summary_res_id: int = ID_NULL
    intent_action: Optional[str] = None
    profile: Profile = Profile.PRIMARY
    initial_display_state: InitialDisplayState = InitialDisplayState.UNSPECIFIED
    max_severity_level: Optional[int] = None
    search_terms_res_id: int = ID_NULL
    broadcast_receiver_class_name: Optional[str] = None
    disallow_logging: bool = False
    allow_refresh_on_page_open: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.name.lower(),
            'id': self.id,
            'package_name': self.package_name,
            'title_res_id': self.title_res_id,
            'title_for_work_res_id': self.title_for_work_res_id,
            'summary_res_id': self.summary_res_id,
            'intent_action': self.intent_action,
            'profile': self.profile.name.lower(),
            'initial_display_state': self.initial_display_state.name.lower(),
            'max_severity_level': self.max_severity_level,
            'search_terms_res_id': self.search_terms_res_id,
            'broadcast_receiver_class_name': self.broadcast_receiver_class_name,
            'disallow_logging': self.disallow_logging,
            'allow_refresh_on_page_open': self.allow_refresh_on_page_open,
        }

    class Builder:
        """Accumulates fields for a SafetySource and validates them on build()."""

        _ENTITY = 'safety-source'

        def __init__(self, source: Optional['SafetySource'] = None):
            self._type: EnumValue = SafetySourceType.UNSPECIFIED
            self._id: Optional[str] = None
            self._package_name: Optional[str] = None
            self._title_res_id = ID_NULL
            self._title_for_work_res_id = ID_NULL
            self._summary_res_id = ID_NULL
            self._intent_action: Optional[str] = None
            self._profile: EnumValue = Profile.UNSPECIFIED
            self._initial_display_state: EnumValue = InitialDisplayState.UNSPECIFIED
            self._max_severity_level: Optional[int] = None
            self._search_terms_res_id = ID_NULL
            self._broadcast_receiver_class_name: Optional[str] = None
            self._disallow_logging = False
            self._allow_refresh_on_page_open = False
            if source is not None:
                (self.set_type(source.type)
                    .set_id(source.id)
                    .set_package_name(source.package_name)
                    .set_title_res_id(source.title_res_id)
                    .set_title_for_work_res_id(source.title_for_work_res_id)
                    .set_summary_res_id(source.summary_res_id)
                    .set_intent_action(source.intent_action)
                    .set_profile(source.profile)
                    .set_initial_display_state(source.initial_display_state)
                    .set_max_severity_level(source.max_severity_level)
                    .set_search_terms_res_id(source.search_terms_res_id)
                    .set_broadcast_receiver_class_name(source.broadcast_receiver_class_name)
                    .set_disallow_logging(source.disallow_logging)
                    .set_allow_refresh_on_page_open(source.allow_refresh_on_page_open))

        def set_type(self, value: EnumValue) -> 'SafetySource.Builder':
            self._type = value
            return self

        def set_id(self, value: Optional[str]) -> 'SafetySource.Builder':
            self._id = value
            return self

        def set_package_name(self, value: Optional[str]) -> 'SafetySource.Builder':
            self._package_name = value
            return self

        def set_title_res_id(self, value: int) -> 'SafetySource.Builder':
            self._title_res_id = value
            return self

        def set_title_for_work_res_id(self, value: int) -> 'SafetySource.Builder':
            self._title_for_work_res_id = value
            return self

        def set_summary_res_id(self, value: int) -> 'SafetySource.Builder':
            self._summary_res_id = value
            return self

        def set_intent_action(self, value: Optional[str]) -> 'SafetySource.Builder':
            self._intent_action = value
            return self

        def set_profile(self, value: EnumValue) -> 'SafetySource.Builder':
            self._profile = value
            return self

        def set_initial_display_state(self, value: EnumValue) -> 'SafetySource.Builder':
            self._initial_display_state = value
            return self

        def set_max_severity_level(self, value: Optional[int]) -> 'SafetySource.Builder':
            self._max_severity_level = value
            return self

        def set_search_terms_res_id(self, value: int) -> 'SafetySource.Builder':
            self._search_terms_res_id = value
            return self

        def set_broadcast_receiver_class_name(self, value: Optional[str]) -> 'SafetySource.Builder':
            self._broadcast_receiver_class_name = value
            return self

        def set_disallow_logging(self, value: bool) -> 'SafetySource.Builder':
            self._disallow_logging = value
            return self

        def set_allow_refresh_on_page_open(self, value: bool) -> 'SafetySource.Builder':
            self._allow_refresh_on_page_open = value
            return self

        def build(self) -> 'SafetySource':
            """Validate the accumulated fields and return a new SafetySource.

            Raises:
                BuilderInvariantViolation: naming the first field that breaks
                    the rules for the source's type.
            """
            entity = self._ENTITY
            source_type = _coerce(SafetySourceType, self._type, entity, 'type')
            _require(source_type != SafetySourceType.UNSPECIFIED, entity, 'type', 'required')
            _require(bool(self._id), entity, 'id', 'required')

            profile = _coerce(Profile, self._profile, entity, 'profile')
            if profile == Profile.UNSPECIFIED:
                profile = Profile.PRIMARY
            display_state = _coerce(
                InitialDisplayState, self._initial_display_state, entity, 'initialDisplayState')
            if self._max_severity_level is not None:
                _require(self._max_severity_level >= 0, entity, 'maxSeverityLevel',
                         'must not be negative')

            if source_type == SafetySourceType.STATIC:
                _require(bool(self._intent_action), entity, 'intentAction', 'required')
                _require(self._broadcast_receiver_class_name is None, entity,
                         'broadcastReceiverClassName', 'prohibited for static sources')
                _require(display_state == InitialDisplayState.UNSPECIFIED, entity,
                         'initialDisplayState', 'prohibited for static sources')
                _require(self._max_severity_level is None, entity,
                         'maxSeverityLevel', 'prohibited for static sources')
                _require(not self._disallow_logging, entity,
                         'disallowLogging', 'prohibited for static sources')
                _require(not self._allow_refresh_on_page_open, entity,
                         'allowRefreshOnPageOpen', 'prohibited for static sources')
            elif source_type == SafetySourceType.DYNAMIC:
                _require(bool(self._package_name), entity, 'packageName', 'required')
                if display_state == InitialDisplayState.UNSPECIFIED:
                    display_state = InitialDisplayState.ENABLED
                if display_state != InitialDisplayState.HIDDEN:
                    _require(bool(self._intent_action), entity, 'intentAction', 'required')
            else:
                _require(bool(self._package_name), entity, 'packageName', 'required')
                for field, value in (('title', self._title_res_id),
                                     ('titleForWork', self._title_for_work_res_id),
                                     ('summary', self._summary_res_id),
                                     ('searchTerms', self._search_terms_res_id)):
                    _require(value == ID_NULL, entity, field, 'prohibited for issue-only sources')
                _require(self._intent_action is None, entity,
                         'intentAction', 'prohibited for issue-only sources')
                _require(display_state == InitialDisplayState.UNSPECIFIED, entity,
                         'initialDisplayState', 'prohibited for issue-only sources')

            if self._title_for_work_res_id != ID_NULL:
                _require(profile == Profile.ALL, entity, 'titleForWork',
                         'only allowed for sources shown on all profiles')

            return SafetySource(
                type=source_type,
                id=self._id,
                package_name=self._package_name,
                title_res_id=self._title_res_id,
                title_for_work_res_id=self._title_for_work_res_id,
                summary_res_id=self._summary_res_id,
                intent_action=self._intent_action,
                profile=profile,
                initial_display_state=display_state,
                max_severity_level=self._max_severity_level,
                search_terms_res_id=self._search_terms_res_id,
                broadcast_receiver_class_name=self._broadcast_receiver_class_name,
                disallow_logging=bool(self._disallow_logging),
                allow_refresh_on_page_open=bool(self._allow_refresh_on_page_open),
            )


# ============================================================================
# SAFETY SOURCES GROUP
# ============================================================================

@dataclass(frozen=True)
class SafetySourcesGroup:
    """A named cluster of safety sources sharing display metadata."""
    id: str
    safety_sources: Tuple[SafetySource, ...]
    title_res_id: int = ID_NULL
    summary_res_id: int = ID_NULL
    stateless_icon_type: StatelessIconType = StatelessIconType.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title_res_id': self.title_res_id,
            'summary_res_id': self.summary_res_id,
            'stateless_icon_type': self.stateless_icon_type.name.lower(),
            'safety_sources': [s.to_dict() for s in self.safety_sources],
        }

    class Builder:
        """Accumulates fields for a SafetySourcesGroup."""

        _ENTITY = 'safety-sources-group'

        def __init__(self, group: Optional['SafetySourcesGroup'] = None):
            self._id: Optional[str] = None
            self._title_res_id = ID_NULL
            self._summary_res_id = ID_NULL
            self._stateless_icon_type: EnumValue = StatelessIconType.UNSPECIFIED
            self._safety_sources: List[SafetySource] = []
            if group is not None:
                (self.set_id(group.id)
                    .set_title_res_id(group.title_res_id)
                    .set_summary_res_id(group.summary_res_id)
                    .set_stateless_icon_type(group.stateless_icon_type))
                self._safety_sources.extend(group.safety_sources)

        def set_id(self, value: Optional[str]) -> 'SafetySourcesGroup.Builder':
            self._id = value
            return self

        def set_title_res_id(self, value: int) -> 'SafetySourcesGroup.Builder':
            self._title_res_id = value
            return self

        def set_summary_res_id(self, value: int) -> 'SafetySourcesGroup.Builder':
            self._summary_res_id = value
            return self

        def set_stateless_icon_type(self, value: EnumValue) -> 'SafetySourcesGroup.Builder':
            self._stateless_icon_type = value
            return self

        def add_safety_source(self, source: SafetySource) -> 'SafetySourcesGroup.Builder':
            self._safety_sources.append(source)
            return self

        def build(self) -> 'SafetySourcesGroup':
            entity = self._ENTITY
            _require(bool(self._id), entity, 'id', 'required')
            icon_type = _coerce(
                StatelessIconType, self._stateless_icon_type, entity, 'statelessIconType')
            if icon_type == StatelessIconType.UNSPECIFIED:
                icon_type = StatelessIconType.NONE
            _require(bool(self._safety_sources), entity, 'safety-source',
                     'at least one safety source required')
            return SafetySourcesGroup(
                id=self._id,
                safety_sources=tuple(self._safety_sources),
                title_res_id=self._title_res_id,
                summary_res_id=self._summary_res_id,
                stateless_icon_type=icon_type,
            )


# ============================================================================
# SAFETY CENTER CONFIG
# ============================================================================

@dataclass(frozen=True)
class SafetyCenterConfig:
    """Root of a validated Safety Center configuration."""
    safety_sources_groups: Tuple[SafetySourcesGroup, ...]

    @property
    def safety_sources(self) -> List[SafetySource]:
        """All sources across every group, in document order."""
        return [s for g in self.safety_sources_groups for s in g.safety_sources]

    def find_group(self, group_id: str) -> Optional[SafetySourcesGroup]:
        return next((g for g in self.safety_sources_groups if g.id == group_id), None)

    def find_source(self, source_id: str) -> Optional[SafetySource]:
        return next((s for s in self.safety_sources if s.id == source_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {'safety_sources_groups': [g.to_dict() for g in self.safety_sources_groups]}

    class Builder:
        """Accumulates groups for a SafetyCenterConfig."""

        _ENTITY = 'safety-sources-config'

        def __init__(self, config: Optional['SafetyCenterConfig'] = None):
            self._safety_sources_groups: List[SafetySourcesGroup] = []
            if config is not None:
                self._safety_sources_groups.extend(config.safety_sources_groups)

        def add_safety_sources_group(self, group: SafetySourcesGroup) -> 'SafetyCenterConfig.Builder':
            self._safety_sources_groups.append(group)
            return self

        def build(self) -> 'SafetyCenterConfig':
            _require(bool(self._safety_sources_groups), self._ENTITY, 'safety-sources-group',
                     'at least one safety sources group required')
            return SafetyCenterConfig(safety_sources_groups=tuple(self._safety_sources_groups))
