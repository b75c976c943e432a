"""rolecontext — role-tagged markdown context for coordinator/executor agents."""

from rolecontext.context.sections import Section, parse
from rolecontext.context.store import ContextStore

__version__ = "0.1.0"
