"""Match state machine.

Validates create / join / move requests against the current match state,
mutates it through the registry, and requests a settlement attestation once
a winner is decided.
"""

import logging
import re
from typing import Callable, Optional

from referee.errors import (
    CellTaken,
    GameNotActive,
    InvalidIndex,
    NotCompleted,
    NotFound,
    NotYourTurn,
    SettlementPending,
    SigningError,
)
from referee.models import BOARD_SIZE, Match, MatchStatus, normalize_address
from .registry import MatchRegistry
from .signer import AttestationSigner
from .win import board_full, detect_winner

REPLAY_SAME_STARTER = 'same'
REPLAY_ALTERNATE_STARTER = 'alternate'
REPLAY_STARTERS = (REPLAY_SAME_STARTER, REPLAY_ALTERNATE_STARTER)

# ASCII digits only
_DIGITS_RE = re.compile(r"[0-9]+")


def _coerce_index(cell_index) -> int:
    if isinstance(cell_index, bool):
        raise InvalidIndex()
    if isinstance(cell_index, str) and _DIGITS_RE.fullmatch(cell_index.strip()):
        cell_index = int(cell_index)
    if not isinstance(cell_index, int) or not 0 <= cell_index < BOARD_SIZE:
        raise InvalidIndex()
    return cell_index


class MatchEngine:
    def __init__(
        self,
        registry: MatchRegistry,
        signer: AttestationSigner,
        chain_id: int,
        replay_starter: str = REPLAY_SAME_STARTER,
        logger: Optional[logging.Logger] = None,
        on_change: Optional[Callable[[Match], None]] = None,
    ):
        if replay_starter not in REPLAY_STARTERS:
            raise ValueError(f'replay_starter must be one of {REPLAY_STARTERS}, got {replay_starter!r}')
        self.registry = registry
        self.signer = signer
        self.chain_id = int(chain_id)
        self.replay_starter = replay_starter
        self.logger = logger or logging.getLogger(__name__)
        self.on_change = on_change

    def _changed(self, match: Match) -> Match:
        if self.on_change is not None:
            self.on_change(match)
        return match

    # ---- lifecycle ----

    def create_match(self, player_a: str) -> Match:
        match = self.registry.create(normalize_address(player_a))
        self.logger.info(f"[create] match={match.match_id} player_a={match.player_a}")
        return match

    def join_match(self, match_id: str, player_b: str) -> Match:
        match = self.registry.join(match_id, normalize_address(player_b))
        self.logger.info(f"[join] match={match_id} player_b={match.player_b}")
        return self._changed(match)

    def get_match(self, match_id: str) -> Match:
        match = self.registry.get(match_id)
        if match is None:
            raise NotFound()
        return match

    # ---- moves ----

    def apply_move(self, match_id: str, mover: str, cell_index) -> Match:
        """Apply one move. Raises a validation error without touching state
        when any precondition fails, or SettlementPending when the move won
        but signing did not succeed."""
        with self.registry.lock(match_id):
            match = self.get_match(match_id)
            if match.status is not MatchStatus.PLAYING:
                raise GameNotActive()
            mover = normalize_address(mover)
            if match.turn_identity != mover:
                raise NotYourTurn()
            index = _coerce_index(cell_index)
            if match.board[index] is not None:
                raise CellTaken()

            seat = match.turn
            match = self.registry.place_mark(match_id, seat, index)
            self.logger.info(f"[move] match={match_id} round={match.round} seat={seat.name} cell={index}")

            winner = detect_winner(match.board)
            if winner is not None:
                match = self.registry.complete(match_id, winner)
                self.logger.info(f"[win] match={match_id} winner={match.winner_identity} round={match.round}")
            elif board_full(match.board):
                match = self.registry.reset_board(match_id)
                if self.replay_starter == REPLAY_ALTERNATE_STARTER:
                    match = self.registry.pass_turn(match_id)
                self.logger.info(
                    f"[draw] match={match_id} replay round={match.round} starter={match.turn_identity}"
                )
            else:
                match = self.registry.pass_turn(match_id)

        if match.status is MatchStatus.COMPLETED:
            # Signing runs outside the match lock; the win is already committed.
            return self._attest(match)
        return self._changed(match)

    # ---- settlement ----

    def settle(self, match_id: str) -> Match:
        """Produce the attestation for a won match whose signing failed before.

        Idempotent: a match that already carries an attestation is returned
        as is.
        """
        match = self.get_match(match_id)
        if match.status is not MatchStatus.COMPLETED:
            raise NotCompleted()
        if match.attestation is not None:
            return match
        self.logger.info(f"[settle] match={match_id} retrying attestation")
        return self._attest(match)

    def _attest(self, match: Match) -> Match:
        winner = match.winner_identity
        try:
            attestation = self.signer.sign(self.chain_id, match.match_id, winner)
        except SigningError as exc:
            self.logger.error(f"[sign-fail] match={match.match_id} winner={winner}: {exc}")
            self._changed(match)
            raise SettlementPending(match) from exc

        with self.registry.lock(match.match_id):
            current = self.get_match(match.match_id)
            if current.attestation is not None:
                # A concurrent settle got there first; keep the recorded one.
                return current
            match = self.registry.attach_attestation(match.match_id, attestation)
        self.logger.info(f"[signed] match={match.match_id} signer={attestation.signer}")
        return self._changed(match)
