"""
TeamSearch - Hybrid semantic + lexical search over a spreadsheet team catalog.

Example:
    >>> from teamsearch.domains.search import SearchQuery, TeamSearchEngine
    >>> engine = TeamSearchEngine(embedder, vector_store)
    >>> items = await engine.search(SearchQuery(q="seo agency for saas"))
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
