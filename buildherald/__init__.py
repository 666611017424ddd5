"""buildherald: chat notifications for continuous-delivery pipeline events.

Turns stage lifecycle events (building, passed, failed, broken, fixed,
cancelled) into structured chat messages:
  - First-match rules pick the channel, webhook and feature flags
  - Status table drives color, phrase pool and console-link policy
  - Phrase bank with per-pipeline variants and injectable randomness
  - Root material changes summarised per material, with a denylist
  - Console-log links per job, live tab while building
  - Per-phase degradation: a failed fetch never blocks delivery
"""

__version__ = "0.1.0"
__description__ = "Pipeline stage notifications for chat webhooks"

from buildherald.core.composer import MessageComposer
from buildherald.routing.dispatcher import NotificationDispatcher

__all__ = ["MessageComposer", "NotificationDispatcher", "__version__"]
