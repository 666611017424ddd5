"""buildherald data models — all Pydantic v2, all frozen (immutable)."""

from buildherald.models.events import PipelineEvent, PipelineStatus, classify_status
from buildherald.models.message import ComposedMessage, MessageField
from buildherald.models.pipeline import (
    BuildCause,
    Job,
    Material,
    MaterialRevision,
    Modification,
    PipelineDetails,
    Stage,
)
from buildherald.models.rules import (
    DEFAULT_PHRASES,
    ChangePolicy,
    ConsoleLinkPolicy,
    NotifierSettings,
    PipelineRule,
    PipelineVariant,
    RuleSet,
    TriggeredByPolicy,
)

__all__ = [
    # events
    "PipelineEvent",
    "PipelineStatus",
    "classify_status",
    # message
    "ComposedMessage",
    "MessageField",
    # pipeline details
    "BuildCause",
    "Job",
    "Material",
    "MaterialRevision",
    "Modification",
    "PipelineDetails",
    "Stage",
    # rules
    "DEFAULT_PHRASES",
    "ChangePolicy",
    "ConsoleLinkPolicy",
    "NotifierSettings",
    "PipelineRule",
    "PipelineVariant",
    "RuleSet",
    "TriggeredByPolicy",
]
