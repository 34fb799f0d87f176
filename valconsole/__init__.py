"""
valconsole - control console for validator nodes
"""

__version__ = "0.1.0"
__logo__ = "⛓"
