import pytest


@pytest.fixture(autouse=True)
def _fresh_managers():
    """Every test starts with empty process-wide front-office managers."""
    from clinic.services import reset_managers

    reset_managers()
    yield
    reset_managers()
