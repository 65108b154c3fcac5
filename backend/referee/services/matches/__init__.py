"""Match domain services: win detection, registry, signing, state machine.

This package holds the referee's game logic. HTTP routes and socket
handlers import from here and stay free of board rules and key handling.
"""

from .engine import MatchEngine
from .registry import MatchRegistry
from .signer import Attestation, AttestationSigner, settlement_digest, verify_attestation
from .win import board_full, detect_winner

__all__ = [
    'Attestation',
    'AttestationSigner',
    'MatchEngine',
    'MatchRegistry',
    'board_full',
    'detect_winner',
    'settlement_digest',
    'verify_attestation',
]
