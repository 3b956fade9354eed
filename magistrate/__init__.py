"""Two-way serialization of Python objects into byte buffers and files, with traversal and view support."""

__version__ = "1.0.0"