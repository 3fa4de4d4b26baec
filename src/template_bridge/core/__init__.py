"""
Core bridge components.

This module contains the block template model, the template cache, the poll
loop and the status reporter.
"""

from template_bridge.core.template import BlockHeader, BlockTemplate
from template_bridge.core.cache import ReadOnlyTemplateView, TemplateCache, TemplateView
from template_bridge.core.poller import CycleResult, PollState, TemplatePoller
from template_bridge.core.status import StatusReporter, format_template_status

__all__ = [
    "BlockHeader",
    "BlockTemplate",
    "TemplateCache",
    "TemplateView",
    "ReadOnlyTemplateView",
    "TemplatePoller",
    "PollState",
    "CycleResult",
    "StatusReporter",
    "format_template_status",
]
