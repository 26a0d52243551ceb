"""Access-review governance workflow built on the IGA connectors."""

__all__ = [
    "config",
    "models",
    "store",
    "parser",
    "campaigns",
    "decisions",
    "delegation",
    "revocation",
    "directory_sync",
    "notifications",
    "handlers",
]
