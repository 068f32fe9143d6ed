"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
Import concrete adapters from their subpackages (``teamsearch.adapters.jina``,
``teamsearch.adapters.faiss`` ...) so optional native libraries load only
when used.
"""

__all__ = [
    "faiss",
    "jina",
    "memory",
    "qdrant",
    "spreadsheet",
]
