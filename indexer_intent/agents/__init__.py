from .intent_analyzer import IntentAnalyzer

__all__ = ["IntentAnalyzer"]
