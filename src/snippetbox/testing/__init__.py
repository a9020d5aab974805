"""Test utilities for snippetbox applications::

    from snippetbox.testing import TestClient, extract_csrf_token
"""

from snippetbox.testing.client import TestClient, extract_csrf_token

__all__ = ["TestClient", "extract_csrf_token"]
