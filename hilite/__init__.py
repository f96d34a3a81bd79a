"""Token types, regex state-machine lexers, lexer registries, token remapping and styles."""

__version__ = "0.1.0"

__all__ = ["__version__"]