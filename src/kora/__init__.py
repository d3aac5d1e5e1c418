"""kora: a terminal file archive with diacritic-insensitive search."""

__version__ = "0.1.0"
