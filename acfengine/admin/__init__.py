from .overrides import AdminOverrides

__all__ = ["AdminOverrides"]
