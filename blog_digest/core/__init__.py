"""Core utilities shared by the blog-digest commands."""
