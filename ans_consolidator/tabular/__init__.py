from .reader import TabularReadError, TabularSource, open_source

__all__ = ["TabularReadError", "TabularSource", "open_source"]
