"""Test basic package imports."""


def test_package_import():
    """Test that the main package can be imported."""
    import p2p_rate_alert

    assert p2p_rate_alert.__version__ == "0.1.0"


def test_main_module_import():
    """Test that main modules can be imported."""
    from p2p_rate_alert import interfaces, main, orchestrator

    assert callable(main.main)
    assert hasattr(orchestrator, "ApplicationOrchestrator")
    assert hasattr(interfaces, "IRateSource")


def test_components_import():
    """Test that the component package exports the core pieces."""
    from p2p_rate_alert.components import (
        ControlPlane,
        EligibilityPipeline,
        OfferScanner,
        RatePoller,
        SpamFilterStore,
    )

    assert all(
        [ControlPlane, EligibilityPipeline, OfferScanner, RatePoller, SpamFilterStore]
    )
