from .index import TreeIndex

__all__ = ["TreeIndex"]
