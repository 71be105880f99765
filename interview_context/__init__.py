"""
Interview Context
=================

Conversation context management for AI mock interviews.
"""

__version__ = "1.0.0"
