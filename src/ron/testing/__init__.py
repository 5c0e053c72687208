"""Test utilities for ron applications::

    from ron.testing import TestClient
"""

from ron.testing.client import TestClient

__all__ = ["TestClient"]
