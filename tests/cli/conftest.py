import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup(mocker):
    """Keep the CLI from attaching handlers to the runner's captured streams."""
    return mocker.patch("kubemon.client.cli.main.configure_client_logging")
