"""Tests for the NTT engine, roots of unity and evaluation domains."""

import galois
import numpy as np
import pytest

from frieda.primitives.domain import EvaluationDomain
from frieda.primitives.field import (
    FF,
    GOLDILOCKS_PRIME,
    SHIFT,
    TWO_ADICITY,
    batch_inverse,
    get_omega,
    get_omega_inv,
    powers,
)
from frieda.primitives.ntt import NTT, get_ntt, intt, ntt
from frieda.protocol.lde import domain_for, extend
from frieda.errors import InvalidInputError


class TestRootsOfUnity:
    """Roots of unity must form a consistent 2-adic tower."""

    @pytest.mark.parametrize("n_bits", range(1, TWO_ADICITY + 1))
    def test_square_is_previous_root(self, n_bits: int) -> None:
        assert FF(get_omega(n_bits)) ** 2 == FF(get_omega(n_bits - 1))

    @pytest.mark.parametrize("n_bits", [0, 1, 5, 17, TWO_ADICITY])
    def test_inverse(self, n_bits: int) -> None:
        assert FF(get_omega(n_bits)) * FF(get_omega_inv(n_bits)) == FF(1)

    def test_half_order_is_minus_one(self) -> None:
        assert int(FF(get_omega(TWO_ADICITY)) ** (1 << (TWO_ADICITY - 1))) == GOLDILOCKS_PRIME - 1

    def test_matches_galois(self) -> None:
        assert get_omega(10) == int(FF.primitive_root_of_unity(1024))

    def test_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            get_omega(TWO_ADICITY + 1)


class TestBatchInverse:

    def test_matches_individual_inverses(self) -> None:
        values = FF.Random(17, low=1, seed=3)
        assert np.array_equal(batch_inverse(values), values ** -1)

    def test_zero_raises(self) -> None:
        with pytest.raises(ZeroDivisionError):
            batch_inverse(FF([1, 0, 2]))


class TestNTT:
    """Test NTT operations."""

    @pytest.mark.parametrize("n_bits", [0, 1, 3, 4, 6, 8, 10])
    def test_ntt_intt_roundtrip(self, n_bits: int) -> None:
        """Test that INTT(NTT(x)) == x."""
        N = 1 << n_bits
        engine = NTT(N)
        coeffs = FF.Random(N, seed=n_bits)

        recovered = engine.intt(engine.ntt(coeffs))

        assert np.array_equal(coeffs, recovered), "NTT/INTT roundtrip failed"

    @pytest.mark.parametrize("n_bits", [1, 2, 3, 5])
    def test_ntt_matches_direct_evaluation(self, n_bits: int) -> None:
        """ntt(c)[i] == c(w^i) in natural order."""
        N = 1 << n_bits
        coeffs = FF.Random(N, seed=100 + n_bits)
        points = powers(get_omega(n_bits), N)

        expected = galois.Poly(coeffs[::-1], field=FF)(points)

        assert np.array_equal(ntt(coeffs), expected)

    @pytest.mark.parametrize("n_bits", [2, 4, 6])
    def test_coset_ntt_matches_shifted_points(self, n_bits: int) -> None:
        N = 1 << n_bits
        engine = get_ntt(N)
        coeffs = FF.Random(N, seed=200 + n_bits)

        points = powers(get_omega(n_bits), N) * SHIFT
        expected = galois.Poly(coeffs[::-1], field=FF)(points)

        assert np.array_equal(engine.coset_ntt(coeffs), expected)

    def test_matches_galois_ntt(self) -> None:
        coeffs = FF.Random(1024, seed=7)
        assert np.array_equal(ntt(coeffs), galois.ntt(coeffs))
        assert np.array_equal(intt(galois.ntt(coeffs)), coeffs)

    def test_intt_of_constant_is_constant(self) -> None:
        evals = FF([5] * 8)
        expected = FF([5, 0, 0, 0, 0, 0, 0, 0])
        assert np.array_equal(intt(evals), expected)

    def test_engines_are_shared(self) -> None:
        assert get_ntt(16) is get_ntt(16)


class TestEvaluationDomain:

    def test_elements_match_element(self) -> None:
        domain = EvaluationDomain(4)
        elements = domain.elements()
        for i in range(domain.size):
            assert elements[i] == domain.element(i)

    def test_fold_maps_points(self) -> None:
        domain = EvaluationDomain(5)
        folded = domain.fold(2)
        assert folded.size == domain.size // 4
        for i in range(folded.size):
            assert domain.element(i) ** 4 == folded.element(i)

    def test_coset_avoids_subgroup(self) -> None:
        # 1 is in every subgroup; the shifted coset must not contain it
        domain = EvaluationDomain(6)
        assert all(int(x) != 1 for x in domain.elements())

    def test_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            EvaluationDomain(TWO_ADICITY + 1)
        with pytest.raises(IndexError):
            EvaluationDomain(2).element(4)


class TestExtend:

    @pytest.mark.parametrize("blowup_log", [0, 1, 2, 4])
    def test_extend_evaluates_on_coset(self, blowup_log: int) -> None:
        coeffs = FF.Random(8, seed=blowup_log)
        domain = domain_for(8, blowup_log)

        expected = galois.Poly(coeffs[::-1], field=FF)(domain.elements())

        assert np.array_equal(extend(coeffs, blowup_log), expected)

    def test_extend_uses_shift(self) -> None:
        assert domain_for(4, 1).shift == int(SHIFT)

    def test_non_power_of_two_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            extend(FF([1, 2, 3]), 1)
        with pytest.raises(InvalidInputError):
            extend(FF([1, 2, 3, 4]), -1)
