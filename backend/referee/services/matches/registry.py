import secrets
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Optional

from referee.errors import AlreadyFull, AttestationAlreadySet, NotFound, SelfPlay
from referee.models import Match, MatchStatus, Seat, empty_board, normalize_identity, now_ms


def random_match_id(digits: int = 6) -> str:
    """Fixed-width decimal id, usable as a uint256 on chain."""
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))


class MatchRegistry:
    """In-memory store of live matches.

    All writes to a Match go through this class. Each mutator takes the
    match's re-entrant lock, and callers that need read-validate-write
    atomicity hold ``lock(match_id)`` around the whole sequence.
    Reads hand out snapshots, never the live object.
    """

    def __init__(self, id_digits: int = 6, id_factory: Optional[Callable[[], str]] = None):
        if id_digits < 1:
            raise ValueError('id_digits must be positive')
        self._id_factory = id_factory or (lambda: random_match_id(id_digits))
        self._matches: Dict[str, Match] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._matches)

    def __contains__(self, match_id) -> bool:
        return match_id in self._matches

    @contextmanager
    def lock(self, match_id: str):
        with self._guard:
            match_lock = self._locks.get(match_id)
        if match_lock is None:
            raise NotFound()
        with match_lock:
            yield

    def _require(self, match_id) -> Match:
        match = self._matches.get(match_id)
        if match is None:
            raise NotFound()
        return match

    # ---- creation / lookup ----

    def create(self, player_a: str) -> Match:
        player_a = normalize_identity(player_a)
        with self._guard:
            match_id = self._id_factory()
            while match_id in self._matches:
                match_id = self._id_factory()
            match = Match(match_id=match_id, player_a=player_a)
            self._matches[match_id] = match
            self._locks[match_id] = threading.RLock()
        return match.snapshot()

    def get(self, match_id) -> Optional[Match]:
        match = self._matches.get(match_id)
        if match is None:
            return None
        with self.lock(match_id):
            return match.snapshot()

    def join(self, match_id, player_b: str) -> Match:
        player_b = normalize_identity(player_b)
        with self.lock(match_id):
            match = self._require(match_id)
            if match.player_b is not None:
                raise AlreadyFull()
            if player_b == match.player_a:
                raise SelfPlay()
            match.player_b = player_b
            match.status = MatchStatus.PLAYING
            match.updated_at = now_ms()
            return match.snapshot()

    # ---- board mutators (callers validate first) ----

    def place_mark(self, match_id, seat: Seat, index: int) -> Match:
        with self.lock(match_id):
            match = self._require(match_id)
            if match.board[index] is not None:
                raise RuntimeError(f'cell {index} of match {match_id} already filled')
            match.board[index] = seat
            match.updated_at = now_ms()
            return match.snapshot()

    def pass_turn(self, match_id) -> Match:
        with self.lock(match_id):
            match = self._require(match_id)
            match.turn = match.turn.other
            match.updated_at = now_ms()
            return match.snapshot()

    def reset_board(self, match_id) -> Match:
        with self.lock(match_id):
            match = self._require(match_id)
            match.board = empty_board()
            match.round += 1
            match.updated_at = now_ms()
            return match.snapshot()

    def complete(self, match_id, winner: Seat) -> Match:
        with self.lock(match_id):
            match = self._require(match_id)
            if match.status is not MatchStatus.PLAYING:
                raise RuntimeError(f'match {match_id} cannot complete from {match.status.value}')
            match.status = MatchStatus.COMPLETED
            match.winner = winner
            match.updated_at = now_ms()
            return match.snapshot()

    def attach_attestation(self, match_id, attestation) -> Match:
        with self.lock(match_id):
            match = self._require(match_id)
            if match.attestation is not None:
                raise AttestationAlreadySet()
            match.attestation = attestation
            match.updated_at = now_ms()
            return match.snapshot()
