"""Error kinds raised by the match services.

Every rejected operation maps to exactly one subclass below. The ``kind``
string is part of the JSON contract with clients and must stay stable.
"""


class RefereeError(Exception):
    kind = 'RefereeError'
    status_code = 400
    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


# ---- Validation errors (client-caused, never mutate state) ----

class NotFound(RefereeError):
    kind = 'NotFound'
    status_code = 404
    default_message = 'Game not found'


class AlreadyFull(RefereeError):
    kind = 'AlreadyFull'
    status_code = 409
    default_message = 'Game full'


class SelfPlay(RefereeError):
    kind = 'SelfPlay'
    status_code = 400
    default_message = 'Cannot play against yourself'


class GameNotActive(RefereeError):
    kind = 'GameNotActive'
    status_code = 409
    default_message = 'Game not active'


class NotYourTurn(RefereeError):
    kind = 'NotYourTurn'
    status_code = 403
    default_message = 'Not your turn'


class CellTaken(RefereeError):
    kind = 'CellTaken'
    status_code = 409
    default_message = 'Cell taken'


class InvalidIndex(RefereeError):
    kind = 'InvalidIndex'
    status_code = 400
    default_message = 'Cell index must be an integer in [0, 9)'


class InvalidIdentity(RefereeError):
    kind = 'InvalidIdentity'
    status_code = 400
    default_message = 'Player must be a 0x-prefixed 20-byte hex address'


class NotCompleted(RefereeError):
    kind = 'NotCompleted'
    status_code = 409
    default_message = 'Game has no winner yet'


# ---- Settlement errors (operational, retryable) ----

class SigningError(RefereeError):
    """Raised by the signer when producing a signature fails."""

    kind = 'SigningError'
    status_code = 503
    default_message = 'Signing failed'


class SettlementPending(RefereeError):
    """The match is won but the attestation could not be produced yet.

    Carries the match so callers can still render the decided outcome.
    Retry through ``MatchEngine.settle``.
    """

    kind = 'SettlementPending'
    status_code = 202
    default_message = 'Winner decided, attestation pending; retry settlement'

    def __init__(self, match, message=None):
        super().__init__(message)
        self.match = match

    def to_dict(self):
        payload = super().to_dict()
        payload['game'] = self.match.to_dict()
        return payload


class AttestationAlreadySet(RefereeError):
    kind = 'AttestationAlreadySet'
    status_code = 409
    default_message = 'Attestation already recorded for this match'


# ---- Fatal ----

class SignerConfigError(RefereeError):
    """Missing or malformed signing key. The app refuses to start."""

    kind = 'SignerConfigError'
    status_code = 500
    default_message = 'Signing key missing or malformed'
