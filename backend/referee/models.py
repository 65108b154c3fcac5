import enum
import re
import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, List, Optional

from referee.errors import InvalidIdentity

if TYPE_CHECKING:
    from referee.services.matches.signer import Attestation

BOARD_SIZE = 9

_ADDRESS_RE = re.compile(r'^0x[0-9a-f]{40}$')


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_identity(identity) -> str:
    """Lowercase and strip an account identifier."""
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidIdentity()
    return identity.strip().lower()


def normalize_address(identity) -> str:
    """Normalize and require an EVM address (0x + 40 hex chars)."""
    value = normalize_identity(identity)
    if not _ADDRESS_RE.match(value):
        raise InvalidIdentity()
    return value


class MatchStatus(str, enum.Enum):
    WAITING = 'WAITING'
    PLAYING = 'PLAYING'
    COMPLETED = 'COMPLETED'


class Seat(enum.IntEnum):
    """Which side of the board a participant plays. The value is the mark."""

    PLAYER_A = 1
    PLAYER_B = 2

    @property
    def symbol(self) -> str:
        return 'X' if self is Seat.PLAYER_A else 'O'

    @property
    def other(self) -> 'Seat':
        return Seat.PLAYER_B if self is Seat.PLAYER_A else Seat.PLAYER_A


def empty_board() -> List[Optional[Seat]]:
    return [None] * BOARD_SIZE


@dataclass
class Match:
    match_id: str
    player_a: str
    player_b: Optional[str] = None
    board: List[Optional[Seat]] = field(default_factory=empty_board)
    turn: Seat = Seat.PLAYER_A
    status: MatchStatus = MatchStatus.WAITING
    winner: Optional[Seat] = None
    attestation: Optional['Attestation'] = None
    round: int = 1
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def identity_of(self, seat: Optional[Seat]) -> Optional[str]:
        if seat is None:
            return None
        return self.player_a if seat is Seat.PLAYER_A else self.player_b

    def seat_of(self, identity: str) -> Optional[Seat]:
        # Only used to resolve the caller of a request, never to pick a mark.
        if identity == self.player_a:
            return Seat.PLAYER_A
        if self.player_b is not None and identity == self.player_b:
            return Seat.PLAYER_B
        return None

    @property
    def turn_identity(self) -> Optional[str]:
        return self.identity_of(self.turn)

    @property
    def winner_identity(self) -> Optional[str]:
        return self.identity_of(self.winner)

    @property
    def settlement_pending(self) -> bool:
        return self.status is MatchStatus.COMPLETED and self.attestation is None

    def snapshot(self) -> 'Match':
        # Attestations are immutable; the board is copied so callers cannot
        # reach the registry's live object.
        return replace(self, board=list(self.board))

    def to_dict(self):
        attestation = self.attestation.to_dict() if self.attestation is not None else None
        return {
            'matchId': self.match_id,
            'playerA': self.player_a,
            'playerB': self.player_b,
            'board': [cell.symbol if cell is not None else None for cell in self.board],
            'turn': self.turn_identity,
            'status': self.status.value,
            'winner': self.winner_identity,
            'signature': attestation['signature'] if attestation else None,
            'attestation': attestation,
            'round': self.round,
            'settlementPending': self.settlement_pending,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }
