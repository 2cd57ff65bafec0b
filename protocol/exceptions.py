"""
Open Assets Protocol - Protocol Exceptions

This module defines custom exceptions for marker output encoding and decoding.
"""


class ProtocolError(Exception):
    """Base exception for Open Assets protocol errors."""
    pass


class MarkerOutputError(ProtocolError):
    """Exception raised when a marker output payload cannot be encoded or decoded."""
    pass
