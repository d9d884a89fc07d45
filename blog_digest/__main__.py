"""Run the blog-digest CLI with ``python -m blog_digest``."""

from blog_digest.cli import app

app()
