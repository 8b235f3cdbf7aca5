"""
rag_chat: intent-routed retrieval-augmented chat assistant.
"""

__version__ = "0.1.0"
