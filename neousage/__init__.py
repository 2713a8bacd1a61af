"""
neousage - Analyze Neovate Code usage statistics.
"""

__version__ = "0.1.0"
__logo__ = "📊"
