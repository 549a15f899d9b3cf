"""Index construction and the immutable index model."""

from .builder import IndexBuilder, PartialIndex, build
from .model import Index

__all__ = ["Index", "IndexBuilder", "PartialIndex", "build"]
