"""
Flow Connectors

Integration connectors for a conversational flow engine. Each connector makes a
single call to a third-party API and stores the result in the conversation.
"""

__version__ = "0.1.0"
