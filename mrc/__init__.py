"""Release commit filtering for packages living in a monorepo."""

__version__ = "0.1.0"
