"""FRI folding: shrink a codeword by the fan-in using a random challenge."""

from functools import lru_cache
from typing import List, Sequence, Tuple

from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import FF, get_omega_inv, powers
from frieda.primitives.merkle_tree import MerkleTree, transpose_for_merkle


class FRI:
    """FRI layer operations.

    A layer of size n over domain D folds by f = 2^fold_log into a layer of
    size n/f over D^f. Group g holds the values at positions g + i*(n/f) for
    i < f: the f points of D whose f-th power is the g-th point of D^f.

    Writing P(X) = sum_i X^i P_i(X^f), the folded layer evaluates
    sum_i challenge^i P_i(Y). Per group this is a small INTT of the f values
    followed by a re-scaling by x_g^(-i) and a Horner evaluation at the
    challenge.
    """

    @staticmethod
    def fold(values: FF, domain: EvaluationDomain, fold_log: int, challenge: FF) -> FF:
        """Fold a whole layer.

        Args:
            values: Layer evaluations over ``domain`` (natural order)
            domain: Domain of this layer
            fold_log: log2 of the fan-in
            challenge: Folding challenge drawn from the transcript

        Returns:
            Evaluations of the folded layer over ``domain.fold(fold_log)``
        """
        n_out = domain.size >> fold_log
        groups = FF(values).reshape(1 << fold_log, n_out)

        # x_g^(-1) = shift^(-1) * w^(-g)
        x_inv = powers(domain.generator_inv, n_out) * (FF(domain.shift) ** -1)
        return FRI._fold_groups(groups, x_inv, fold_log, challenge)

    @staticmethod
    def verify_fold(
        group_values: Sequence[int],
        group_index: int,
        domain: EvaluationDomain,
        fold_log: int,
        challenge: FF,
    ) -> FF:
        """Recompute the folded value of one group from its f opened values."""
        groups = FF([int(v) for v in group_values]).reshape(1 << fold_log, 1)
        x = FF(domain.shift) * domain.generator ** group_index
        x_inv = FF([int(x ** -1)])
        return FRI._fold_groups(groups, x_inv, fold_log, challenge)[0]

    @staticmethod
    def combine(columns: Sequence, challenge: FF) -> FF:
        """Batch codewords into one: sum_j challenge^j * columns[j].

        Works on whole codewords or on the column values of a single leaf.
        """
        acc = FF(columns[-1])
        for column in reversed(columns[:-1]):
            acc = acc * FF(int(challenge)) + FF(column)
        return acc

    @staticmethod
    def merkelize(values: FF, fold_log: int) -> MerkleTree:
        """Commit to a layer with one Merkle leaf per fold group."""
        n = len(values)
        fan_in = 1 << fold_log
        tree = MerkleTree()
        tree.merkelize(transpose_for_merkle(values, n, fan_in), n // fan_in, fan_in)
        return tree

    @staticmethod
    def group_of(position: int, layer_size: int, fold_log: int) -> Tuple[int, int]:
        """Return (group index, slot within the group) of a layer position."""
        n_out = layer_size >> fold_log
        return position % n_out, position // n_out

    @staticmethod
    def group_positions(group_index: int, layer_size: int, fold_log: int) -> List[int]:
        """Layer positions of the members of a fold group, by slot."""
        n_out = layer_size >> fold_log
        return [group_index + i * n_out for i in range(1 << fold_log)]

    # --- Internal ---

    @staticmethod
    def _fold_groups(groups: FF, x_inv: FF, fold_log: int, challenge: FF) -> FF:
        """Fold columns of a (fan_in, n_groups) matrix of group values."""
        fan_in = 1 << fold_log
        coeffs = _intt_small(fold_log) @ groups

        y = x_inv * FF(int(challenge))
        acc = coeffs[fan_in - 1]
        for i in range(fan_in - 2, -1, -1):
            acc = acc * y + coeffs[i]
        return acc


@lru_cache(maxsize=None)
def _intt_small(fold_log: int) -> FF:
    """Inverse DFT matrix of size 2^fold_log: M[i, t] = w^(-i*t) / 2^fold_log."""
    n = 1 << fold_log
    w_inv = FF(get_omega_inv(fold_log))
    n_inv = FF(n) ** -1
    return FF([[int(w_inv ** (i * t) * n_inv) for t in range(n)] for i in range(n)])
