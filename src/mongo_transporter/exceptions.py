"""Exceptions raised by the MongoDB transporter."""

from __future__ import annotations


class TransporterError(Exception):
    """Root exception for the transporter."""


class TransporterValidationError(TransporterError):
    """Raised when a request, endpoint or item has the wrong shape."""


class MongoConnectionError(TransporterError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(TransporterError):
    """Raised when a query descriptor cannot be compiled."""
