"""Test utilities for junction applications.

    from junction.testing import TestClient
"""

from junction.testing.client import TestClient

__all__ = ["TestClient"]
