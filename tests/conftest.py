import pytest

from orderguard.client import OrderClient
from orderguard.keys import ClientKeyPair, MasterKey
from orderguard.messages import create_signed_envelope
from orderguard.server import create_router


@pytest.fixture
def master_key():
    return MasterKey.generate()


@pytest.fixture
def router(master_key):
    return create_router(master_key)


@pytest.fixture
def registry(router):
    return router.registry


@pytest.fixture
def vault(router):
    return router.vault


@pytest.fixture
def verifier(router):
    return router.verifier


@pytest.fixture
def client(router):
    return OrderClient.register(router)


@pytest.fixture
def envelope():
    """Build a raw envelope: envelope(client_id, content, key_pair)."""
    def _build(client_id: int, content: str, key_pair: ClientKeyPair) -> str:
        return create_signed_envelope(client_id, content, key_pair.sign(content.encode("utf-8")))
    return _build
