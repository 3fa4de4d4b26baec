"""
Kaspa Template Bridge

Polls a Kaspa node for block templates and relays them to a Redis pub/sub
channel, so mining workers can consume the latest template without each
holding a node connection.
"""

__version__ = "0.1.0"

from template_bridge.core.template import BlockHeader, BlockTemplate
from template_bridge.core.cache import TemplateCache, TemplateView
from template_bridge.core.poller import PollState, TemplatePoller
from template_bridge.core.status import StatusReporter
from template_bridge.bridge import TemplateBridge

__all__ = [
    "BlockHeader",
    "BlockTemplate",
    "TemplateCache",
    "TemplateView",
    "TemplatePoller",
    "PollState",
    "StatusReporter",
    "TemplateBridge",
]
