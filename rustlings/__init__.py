"""Runner for small Rust exercises: compile, test, lint, watch and track progress."""

__version__ = "5.5.1"
__all__ = ["__version__"]