import os

from dotenv import load_dotenv

load_dotenv()


def _split(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Hex private key of the settlement signer; the contract's trusted signer.
    # PRIVATE_KEY is accepted for compatibility with older deployments.
    SIGNER_PRIVATE_KEY = os.environ.get('SIGNER_PRIVATE_KEY') or os.environ.get('PRIVATE_KEY')
    # Chain the settlement contract lives on (137 = Polygon PoS)
    CHAIN_ID = int(os.environ.get('CHAIN_ID', '137'))
    # Width of the decimal match id; raise for more entropy
    MATCH_ID_DIGITS = int(os.environ.get('MATCH_ID_DIGITS', '6'))
    # Who opens the replay round after a draw: 'same' keeps the turn, 'alternate' passes it
    DRAW_REPLAY_STARTER = os.environ.get('DRAW_REPLAY_STARTER', 'same')
    CORS_ORIGINS = _split(os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000',
    ))
