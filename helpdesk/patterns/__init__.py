from .analyzer import PatternAnalyzer

__all__ = ["PatternAnalyzer"]
