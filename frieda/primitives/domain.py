"""Multiplicative coset evaluation domains."""

from dataclasses import dataclass

from frieda.primitives.field import FF, SHIFT, TWO_ADICITY, get_omega, get_omega_inv, powers


@dataclass(frozen=True)
class EvaluationDomain:
    """The coset ``shift * <w>`` of size ``2^log_size``, in natural order.

    Point ``i`` is ``shift * w^i`` with ``w = get_omega(log_size)``.
    """
    log_size: int
    shift: int = int(SHIFT)

    def __post_init__(self) -> None:
        if not 0 <= self.log_size <= TWO_ADICITY:
            raise ValueError(f"Domain log size {self.log_size} outside [0, {TWO_ADICITY}]")

    @property
    def size(self) -> int:
        return 1 << self.log_size

    @property
    def generator(self) -> FF:
        return FF(get_omega(self.log_size))

    @property
    def generator_inv(self) -> FF:
        return FF(get_omega_inv(self.log_size))

    def element(self, index: int) -> FF:
        """Return the domain point at ``index``."""
        if not 0 <= index < self.size:
            raise IndexError(f"Domain index {index} out of range [0, {self.size})")
        return FF(self.shift) * self.generator ** index

    def elements(self) -> FF:
        """Return all domain points."""
        return powers(get_omega(self.log_size), self.size) * FF(self.shift)

    def fold(self, fold_log: int) -> "EvaluationDomain":
        """Image of this domain under ``x -> x^(2^fold_log)``."""
        if fold_log > self.log_size:
            raise ValueError(f"Cannot fold a 2^{self.log_size} domain by 2^{fold_log}")
        shift = FF(self.shift) ** (1 << fold_log)
        return EvaluationDomain(self.log_size - fold_log, int(shift))
