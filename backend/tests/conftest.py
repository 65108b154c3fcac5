import os
import sys
import pytest

# Ensure the backend root (containing the `referee` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from referee import create_app, socketio
from referee.services.matches import AttestationSigner, MatchEngine, MatchRegistry

# Throwaway key used only by the test suite.
TEST_PRIVATE_KEY = '0x' + '4f' * 32

ALICE = '0x' + 'a1' * 20
BOB = '0x' + 'b2' * 20
CAROL = '0x' + 'c3' * 20


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    SIGNER_PRIVATE_KEY = TEST_PRIVATE_KEY
    CHAIN_ID = 137
    MATCH_ID_DIGITS = 6
    DRAW_REPLAY_STARTER = 'same'
    CORS_ORIGINS = ['http://localhost:5173']


class FlakySigner:
    """Signer double whose first ``failures`` calls raise SigningError."""

    def __init__(self, inner, failures=1):
        self.inner = inner
        self.failures = failures
        self.calls = 0

    @property
    def address(self):
        return self.inner.address

    def sign(self, chain_id, match_id, winner):
        from referee.errors import SigningError
        self.calls += 1
        if self.calls <= self.failures:
            raise SigningError('rpc signer unavailable')
        return self.inner.sign(chain_id, match_id, winner)


@pytest.fixture()
def signer():
    return AttestationSigner.from_key(TEST_PRIVATE_KEY)


@pytest.fixture()
def registry():
    return MatchRegistry()


@pytest.fixture()
def engine(registry, signer):
    return MatchEngine(registry, signer, chain_id=137)


@pytest.fixture()
def playing(engine):
    """A match between ALICE and BOB, joined and ready for the first move."""
    match = engine.create_match(ALICE)
    return engine.join_match(match.match_id, BOB)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
