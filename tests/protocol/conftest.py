import pytest

from mcrconpy.protocol import RCONClientProtocol


@pytest.fixture
def client() -> RCONClientProtocol:
    return RCONClientProtocol()
