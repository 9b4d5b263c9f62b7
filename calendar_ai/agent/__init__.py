"""
Natural-language event extraction pipeline
"""

from .follow_up import handle_follow_up
from .orchestrator import parse_event_description
from .schemas import EventDraft, ExtractionResult, RequestContext
from .suggestions import generate_scheduling_suggestions

__all__ = [
    "parse_event_description",
    "handle_follow_up",
    "generate_scheduling_suggestions",
    "EventDraft",
    "ExtractionResult",
    "RequestContext",
]
