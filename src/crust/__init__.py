"""crust — build and developer tooling with lazily resolved command dependencies."""

__version__ = "0.1.0"
