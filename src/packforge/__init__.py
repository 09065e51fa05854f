"""packforge - package compiled applications into OS-native artifacts."""

__version__ = "0.1.0"
