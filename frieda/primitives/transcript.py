"""
Fiat-Shamir transcript over a Blake2s hash chain.

The transcript absorbs commitment roots, an optional caller seed, folded
layer data and the proof-of-work nonce, and squeezes FRI challenges and
query positions. Prover and verifier must perform the same absorbs in the
same order:

    root -> [seed] -> (challenge, layer root)* -> final layer -> grind
         -> nonce -> positions
"""

from typing import Iterable, List

from frieda.primitives.field import FF, GOLDILOCKS_PRIME
from frieda.primitives.hashing import HASH_SIZE, grinding, hash_bytes, serialize_values, verify_grinding


class Transcript:
    """
    Fiat-Shamir transcript.

    Attributes:
        state: Running digest; every absorb replaces it with H(state || data)
        n_draws: Number of squeezes since the last absorb
    """

    def __init__(self, domain_separator: bytes = b"frieda") -> None:
        self.state = hash_bytes(domain_separator)
        self.n_draws = 0

    # --- Absorb ---

    def put(self, input_data: bytes) -> None:
        """Absorb raw bytes."""
        self._update_state(bytes(input_data))

    def put_u64(self, value: int) -> None:
        """Absorb an unsigned 64-bit integer (little-endian)."""
        if not 0 <= value < (1 << 64):
            raise ValueError(f"Value {value} does not fit in 64 bits")
        self._update_state(value.to_bytes(8, "little"))

    def put_elements(self, values: Iterable) -> None:
        """Absorb field elements in canonical serialization."""
        self._update_state(serialize_values(values))

    def _update_state(self, data: bytes) -> None:
        self.state = hash_bytes(self.state + data)
        self.n_draws = 0

    # --- Squeeze ---

    def _squeeze(self) -> bytes:
        """Draw HASH_SIZE pseudo-random bytes without changing the state."""
        out = hash_bytes(self.state + self.n_draws.to_bytes(8, "little") + b"\x00")
        self.n_draws += 1
        return out

    def get_field(self) -> FF:
        """Draw a field element challenge.

        128 squeezed bits reduced mod p; the bias is below 2^-64.
        """
        return FF(int.from_bytes(self._squeeze()[:16], "little") % GOLDILOCKS_PRIME)

    def get_state(self) -> bytes:
        """Current transcript digest (the proof-of-work challenge)."""
        return self.state

    def sample_positions(self, count: int, domain_size: int) -> List[int]:
        """
        Derive ``count`` query positions in [0, domain_size).

        Each squeeze yields HASH_SIZE // 8 little-endian 64-bit words, each
        reduced modulo ``domain_size``. Duplicates are kept.
        """
        if domain_size < 1:
            raise ValueError(f"Domain size must be positive, got {domain_size}")

        positions: List[int] = []
        while len(positions) < count:
            block = self._squeeze()
            for i in range(0, HASH_SIZE, 8):
                if len(positions) == count:
                    break
                positions.append(int.from_bytes(block[i:i + 8], "little") % domain_size)
        return positions

    # --- Proof of work ---

    def grind(self, pow_bits: int) -> int:
        """Find the proof-of-work nonce for the current state."""
        return grinding(self.state, pow_bits)

    def check_grinding(self, nonce: int, pow_bits: int) -> bool:
        """Check a proof-of-work nonce against the current state."""
        return verify_grinding(self.state, nonce, pow_bits)
