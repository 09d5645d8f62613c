"""Protocol configuration.

One immutable FriConfig is threaded through every call; there is no
module-level mutable state, so protocol instances with different parameters
can run side by side.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

from frieda.errors import InvalidInputError
from frieda.primitives.field import TWO_ADICITY


@dataclass(frozen=True)
class FriConfig:
    """FRI and sampling parameters.

    Attributes:
        blowup_log: log2 of the Reed-Solomon expansion factor
        num_queries: Positions sampled per proof
        pow_bits: Proof-of-work difficulty in leading zero bits
        fold_log: log2 of the fan-in folded per round
        final_degree_bound: Folding stops once the degree bound reaches this
        batch_size: Codewords sharing one commitment
        security_bits: Statistical security target for sample counts
    """
    blowup_log: int = 4
    num_queries: int = 20
    pow_bits: int = 10
    fold_log: int = 1
    final_degree_bound: int = 1
    batch_size: int = 1
    security_bits: int = 40

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Fail fast on parameters no protocol instance can run with."""
        if not 0 <= self.blowup_log <= TWO_ADICITY:
            raise InvalidInputError(f"blowup_log must be in [0, {TWO_ADICITY}], got {self.blowup_log}")
        if self.num_queries < 1:
            raise InvalidInputError(f"num_queries must be positive, got {self.num_queries}")
        if not 0 <= self.pow_bits <= 64:
            raise InvalidInputError(f"pow_bits must be in [0, 64], got {self.pow_bits}")
        if not 1 <= self.fold_log <= TWO_ADICITY:
            raise InvalidInputError(f"fold_log must be in [1, {TWO_ADICITY}], got {self.fold_log}")
        bound = self.final_degree_bound
        if bound < 1 or bound & (bound - 1):
            raise InvalidInputError(f"final_degree_bound must be a power of two, got {bound}")
        if self.batch_size < 1:
            raise InvalidInputError(f"batch_size must be positive, got {self.batch_size}")
        if self.security_bits < 1:
            raise InvalidInputError(f"security_bits must be positive, got {self.security_bits}")

    @property
    def expansion_factor(self) -> int:
        return 1 << self.blowup_log

    @property
    def fan_in(self) -> int:
        return 1 << self.fold_log

    def domain_log_size(self, log_size_bound: int) -> int:
        """log2 of the evaluation domain for 2^log_size_bound coefficients."""
        log_size = log_size_bound + self.blowup_log
        if log_size > TWO_ADICITY:
            raise InvalidInputError(
                f"Evaluation domain 2^{log_size} exceeds the field's two-adicity {TWO_ADICITY}"
            )
        return log_size

    def num_rounds(self, log_size_bound: int) -> int:
        """Smallest r with final_degree_bound * fan_in^r >= domain / expansion / batch.

        Raises:
            InvalidInputError: If r rounds would fold past a single point
        """
        domain_log = self.domain_log_size(log_size_bound)
        target = (1 << domain_log) // self.expansion_factor // self.batch_size

        rounds = 0
        while self.final_degree_bound * (self.fan_in ** rounds) < target:
            rounds += 1

        if rounds * self.fold_log > domain_log:
            raise InvalidInputError(
                f"{rounds} folding rounds of 2^{self.fold_log} do not fit a 2^{domain_log} domain"
            )
        return rounds

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FriConfig":
        """Build a config from a mapping; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidInputError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**{k: int(v) for k, v in data.items()})


DEFAULT_CONFIG = FriConfig()
