from .resolver_graph import ConversationalIntentResolver
from .state import ResolverState

__all__ = ["ConversationalIntentResolver", "ResolverState"]
