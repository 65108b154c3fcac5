"""Settlement attestations.

The settlement contract recomputes

    keccak256(abi.encodePacked(uint256 chainId, uint256 matchId, address winner))

wraps it as an Ethereum signed message (EIP-191, ``"\\x19Ethereum Signed
Message:\\n32" || hash``) and checks the recovered signer against its trusted
signer address. ``settlement_digest`` is the only place that encoding lives;
changing target contract means changing that function and nothing else.
"""

from dataclasses import dataclass
from typing import Union

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_utils import keccak, to_checksum_address, to_hex
from eth_utils.exceptions import ValidationError

from referee.errors import SignerConfigError, SigningError

SETTLEMENT_TYPES = ('uint256', 'uint256', 'address')


def settlement_digest(chain_id: int, match_id: Union[int, str], winner: str) -> bytes:
    """32-byte hash the contract verifies against."""
    return keccak(encode_packed(
        SETTLEMENT_TYPES,
        (int(chain_id), int(match_id), to_checksum_address(winner)),
    ))


@dataclass(frozen=True)
class Attestation:
    chain_id: int
    match_id: str
    winner: str
    digest: str
    signature: str
    signer: str

    def to_dict(self):
        return {
            'chainId': self.chain_id,
            'matchId': self.match_id,
            'winner': self.winner,
            'digest': self.digest,
            'signature': self.signature,
            'signer': self.signer,
        }


def recover_signer(chain_id, match_id, winner, signature) -> str:
    """Address that produced ``signature`` over the given settlement triple."""
    message = encode_defunct(primitive=settlement_digest(chain_id, match_id, winner))
    return Account.recover_message(message, signature=signature)


def verify_attestation(chain_id, match_id, winner, signature, expected_signer) -> bool:
    try:
        recovered = recover_signer(chain_id, match_id, winner, signature)
    except (ValueError, TypeError, BadSignature, ValidationError):
        return False
    return recovered.lower() == expected_signer.lower()


class AttestationSigner:
    """Holds the process-wide signing key.

    Build it once at startup with ``from_key``; a bad key is fatal there so
    the service never runs without the ability to settle.
    """

    def __init__(self, account):
        self._account = account

    @classmethod
    def from_key(cls, private_key):
        if not private_key or not str(private_key).strip():
            raise SignerConfigError('SIGNER_PRIVATE_KEY is not set')
        key = str(private_key).strip()
        if not key.startswith('0x'):
            key = '0x' + key
        try:
            account = Account.from_key(key)
        except Exception as exc:
            raise SignerConfigError(f'Malformed signing key: {type(exc).__name__}') from exc
        return cls(account)

    @property
    def address(self) -> str:
        return self._account.address

    def sign(self, chain_id: int, match_id: str, winner: str) -> Attestation:
        try:
            digest = settlement_digest(chain_id, match_id, winner)
            signed = self._account.sign_message(encode_defunct(primitive=digest))
        except Exception as exc:
            raise SigningError(f'Signing failed for match {match_id}: {exc}') from exc
        return Attestation(
            chain_id=int(chain_id),
            match_id=str(match_id),
            winner=winner.lower(),
            digest=to_hex(digest),
            signature=to_hex(signed.signature),
            signer=self.address,
        )

    def verify(self, attestation: Attestation) -> bool:
        return verify_attestation(
            attestation.chain_id,
            attestation.match_id,
            attestation.winner,
            attestation.signature,
            self.address,
        )
