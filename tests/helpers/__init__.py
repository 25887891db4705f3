"""Shared fakes and builders for unit tests."""

__all__ = ["fakes", "session"]
