"""Unit tests for package metadata."""

import fact_feed


def test_package_metadata():
    """Test the package only declares its version."""
    assert fact_feed.__version__ == "1.0.0"
    assert not hasattr(fact_feed, "__author__")
    assert not hasattr(fact_feed, "__email__")
