"""
Built-in Tools

- calculator: deterministic arithmetic, built with @tool
- search_documents: semantic document search against Chroma
"""

from .compute import calculator
from .documents import DocumentSearchHandler

__all__ = ["calculator", "DocumentSearchHandler"]
