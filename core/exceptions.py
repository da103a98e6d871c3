# core/exceptions.py

class AdvisorError(Exception):
    """Base class for infrastructure faults that fail a request."""

class EmbeddingError(AdvisorError):
    """The embedding provider could not embed the text."""

class KnowledgeStoreError(AdvisorError):
    """The knowledge collection could not be queried or written."""

class ChatModelError(AdvisorError):
    """The chat model call failed."""
