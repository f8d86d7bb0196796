"""Markdown document model with YAML front matter."""

from factcheck_system.documents.markdown_document import (
    UNTITLED,
    DocumentError,
    MarkdownDocument,
)

__all__ = ["MarkdownDocument", "DocumentError", "UNTITLED"]
