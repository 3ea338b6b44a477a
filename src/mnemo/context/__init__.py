"""Context injection for new sessions.

Components:

- :class:`ContextInjector` - assembles memory, decisions and the latest handoff
  within a token budget
- :class:`InjectedContext` - the assembled payload
"""

from mnemo.context.injector import ContextInjector
from mnemo.context.schema import ContextSource, HandoffDigest, InjectedContext

__all__ = ["ContextInjector", "ContextSource", "HandoffDigest", "InjectedContext"]
