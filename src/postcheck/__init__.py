"""postcheck - post-change verification runner."""

__version__ = "0.1.0"
