"""tmplsync: declarative template version management for Coder."""

__version__ = "0.1.0"
