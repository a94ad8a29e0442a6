"""Synchronize local wikitext documents with pages on a MediaWiki site."""

__version__ = "0.3.0"
