"""Basic tests to verify project setup."""


def test_import_cluster_bridge():
    """Test that cluster_bridge package can be imported."""
    import cluster_bridge

    assert cluster_bridge.__version__ == "0.1.0"


def test_import_cli():
    """Test that CLI module can be imported."""
    from cluster_bridge import cli

    assert cli.app is not None


def test_import_models():
    """Test that models module exports the data model."""
    from cluster_bridge import models

    assert models.Node is not None
    assert models.Route is not None
