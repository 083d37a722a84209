import logging

import pytest

from disc_world.generator import DiscWorldGenerator


@pytest.fixture
def logger():
    return logging.getLogger("disc_world.tests")


@pytest.fixture(scope="session")
def default_world():
    """The default world is expensive to build, so it is shared across tests."""
    generator = DiscWorldGenerator(config={}, logger=logging.getLogger("disc_world.tests"))
    return generator.build()
