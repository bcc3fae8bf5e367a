import pytest

from mcrconpy import RCONClient

from . import FakeServer, ScriptedStream


@pytest.fixture
def server() -> FakeServer:
    return FakeServer(
        responses={
            "seed": ["Seed: [-1137927873379713691]"],
            "help": ["/advancement ...", "/ban ...", "/whitelist ..."],
        }
    )


@pytest.fixture
def stream(server: FakeServer) -> ScriptedStream:
    return ScriptedStream(server)


@pytest.fixture
def client(stream: ScriptedStream) -> RCONClient:
    return RCONClient(stream)
