import logging
import random
import re

import pytest
from py_ecc.optimized_bls12_381 import Z1, Z2, b, b2, is_on_curve, pairing

from zk.circuit import ConstraintSystem, SumCircuit
from zk.errors import ProvingError, SetupError
from zk.field import Fr
from zk.groth16 import (
    QAP,
    Proof,
    create_random_proof,
    generate_random_parameters,
    render_g1,
    render_g2,
)

G1_PATTERN = r"G1Affine \{ x: 0x[0-9a-f]{96}, y: 0x[0-9a-f]{96}, infinity: (true|false) \}"
FP2_PATTERN = r"Fp2 \{ c0: 0x[0-9a-f]{96}, c1: 0x[0-9a-f]{96} \}"
G2_PATTERN = rf"G2Affine \{{ x: {FP2_PATTERN}, y: {FP2_PATTERN}, infinity: (true|false) \}}"
PROOF_PATTERN = re.compile(rf"^Proof \{{ a: {G1_PATTERN}, b: {G2_PATTERN}, c: {G1_PATTERN} \}}$")


@pytest.fixture(scope="module")
def proof(sum_circuit, params):
    return create_random_proof(sum_circuit, params, random.Random(99))


def _qap_for(circuit):
    cs = ConstraintSystem()
    circuit.synthesize(cs)
    return cs, QAP.from_constraint_system(cs)


# ---------------------------------------------------------------------------
# QAP
# ---------------------------------------------------------------------------

def test_qap_appends_input_constraints(sum_circuit):
    _, qap = _qap_for(sum_circuit)
    # two circuit constraints plus ONE * 0 = 0
    assert qap.size == 3
    assert qap.num_variables == 5
    assert qap.target.degree == 3


def test_lagrange_basis_is_indicator_on_domain(sum_circuit):
    _, qap = _qap_for(sum_circuit)
    basis = qap.lagrange_at(Fr(2))
    assert [int(x) for x in basis] == [0, 1, 0]


def test_quotient_exact_for_satisfying_witness(sum_circuit):
    cs, qap = _qap_for(sum_circuit)
    h, exact = qap.quotient(cs.input_assignment + cs.aux_assignment)
    assert exact
    assert h.degree <= qap.size - 2


def test_quotient_inexact_for_wrong_sum():
    cs, qap = _qap_for(SumCircuit(Fr(2), Fr(3), Fr(6)))
    _, exact = qap.quotient(cs.input_assignment + cs.aux_assignment)
    assert not exact


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

def test_parameter_sizes(params):
    assert params.num_inputs == 1
    assert params.num_aux == 4
    assert params.domain_size == 3
    assert len(params.pk.a_query) == 5
    assert len(params.pk.b_g2_query) == 5
    assert len(params.pk.l_query) == 4
    assert len(params.pk.h_query) == 2
    assert len(params.vk.ic) == 1


def test_setup_is_witness_independent(sum_circuit, params):
    shape_only = generate_random_parameters(SumCircuit(), random.Random(1234))
    assert render_g1(shape_only.vk.alpha_g1) == render_g1(params.vk.alpha_g1)
    assert [render_g1(p) for p in shape_only.pk.l_query] == [render_g1(p) for p in params.pk.l_query]


def test_setup_rejects_tau_in_domain(sum_circuit):
    class RiggedRandom:
        """alpha, beta, gamma, delta are 5; tau lands on domain point 1"""

        def __init__(self):
            self.draws = iter([5, 5, 5, 5, 1])

        def randrange(self, start, stop):
            return next(self.draws)

    with pytest.raises(SetupError):
        generate_random_parameters(sum_circuit, RiggedRandom())


# ---------------------------------------------------------------------------
# Proving
# ---------------------------------------------------------------------------

def test_proof_points_on_curve(proof):
    assert is_on_curve(proof.a, b)
    assert is_on_curve(proof.b, b2)
    assert is_on_curve(proof.c, b)


def test_proof_satisfies_pairing_equation(proof, params):
    vk = params.vk
    lhs = pairing(proof.b, proof.a)
    rhs = pairing(vk.beta_g2, vk.alpha_g1) * pairing(vk.gamma_g2, vk.ic[0]) * pairing(vk.delta_g2, proof.c)
    assert lhs == rhs


def test_rendering_format(proof):
    rendered = proof.render()
    assert PROOF_PATTERN.match(rendered)
    assert str(proof) == rendered


def test_to_dict(proof):
    data = proof.to_dict()
    assert data["protocol"] == "groth16"
    assert data["curve"] == "bls12_381"
    assert len(data["b"]) == 2


def test_same_randomness_same_proof(sum_circuit, params, proof):
    again = create_random_proof(sum_circuit, params, random.Random(99))
    assert again.render() == proof.render()


def test_fresh_randomness_blinds_proof(sum_circuit, params, proof):
    other = create_random_proof(sum_circuit, params, random.Random(100))
    assert other.render() != proof.render()


def test_shape_mismatch_raises(params):
    class BiggerCircuit(SumCircuit):
        def synthesize(self, cs):
            super().synthesize(cs)
            extra = cs.alloc("extra", lambda: Fr(0))
            cs.enforce("extra constraint",
                       lambda lc: lc + extra, lambda lc: lc + extra, lambda lc: lc + extra)

    with pytest.raises(ProvingError):
        create_random_proof(BiggerCircuit(Fr(1), Fr(2), Fr(3)), params, random.Random(1))


def test_unsatisfied_witness_still_proves(params, caplog):
    with caplog.at_level(logging.WARNING):
        proof = create_random_proof(SumCircuit(Fr(2), Fr(3), Fr(6)), params, random.Random(5))

    assert isinstance(proof, Proof)
    assert "expected sum constraint" in caplog.text


def test_identity_rendering():
    zero = "0x" + "0" * 96
    one = "0x" + "0" * 95 + "1"
    assert render_g1(Z1) == f"G1Affine {{ x: {zero}, y: {one}, infinity: true }}"
    assert render_g2(Z2) == (f"G2Affine {{ x: Fp2 {{ c0: {zero}, c1: {zero} }}, "
                             f"y: Fp2 {{ c0: {one}, c1: {zero} }}, infinity: true }}")
