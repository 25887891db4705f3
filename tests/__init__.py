"""Test suite for chatlink.

Unit tests live under ``unit/<domain>/`` and are collected by conftest.py
without a ``test_`` prefix. In-memory fakes for the socket, connector and
platform API live in the helpers/ subpackage.
"""
