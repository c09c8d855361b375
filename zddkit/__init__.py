"""Binary and zero-suppressed decision diagrams with top-down construction utilities."""

__version__ = "0.1.0"

__all__ = [
    "bignumber",
    "resources",
    "messages",
    "nodes",
    "operations",
    "serialization",
    "nodetable",
    "sweeper",
    "cardinality",
    "searcher",
    "converters",
]