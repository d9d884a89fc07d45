"""Hierarchical summarization of scraped blog posts."""
