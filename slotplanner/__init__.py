"""
slotplanner - Weekly availability and session management for marketplace experts.
"""

__version__ = "0.1.0"
