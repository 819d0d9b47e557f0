"""
Groth16 parameter generation and proving over BLS12-381.

The constraint system is reduced to a quadratic arithmetic program over
the evaluation domain 1..n. Parameter generation evaluates the QAP at a
secret point tau and publishes the evaluations in the exponent; proving
combines those query points with the witness and two blinding factors.

Curve arithmetic uses py_ecc's projective (optimized) BLS12-381 backend.

Proofs render as a struct-style dump with each coordinate as 0x plus 96 hex
digits. Fp2 coordinates are spelled out as `Fp2 { c0: .., c1: .. }` and the
point at infinity as `infinity: true|false`. This is not byte-for-byte the
Debug output of the Rust bls12_381 crate; only determinism for a fixed
proof is guaranteed.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import galois
from py_ecc.optimized_bls12_381 import (
    G1, G2, Z1, Z2, add, is_inf, multiply, neg, normalize,
)

from .circuit import INPUT, Circuit, ConstraintSystem, LinearCombination, Variable
from .errors import ProvingError, SetupError
from .field import Fr, FieldElement, random_field_element

logger = logging.getLogger(__name__)

# Hex width of a 381-bit base field coordinate
COORDINATE_HEX_DIGITS = 96


# ============================================================================
# CURVE HELPERS
# ============================================================================


def _scalar_mul(point, scalar: FieldElement, zero):
    n = int(scalar)
    if n == 0:
        return zero
    return multiply(point, n)


def _lincomb(points: Sequence, scalars: Sequence[FieldElement], zero):
    """Sum of scalars[i] * points[i], skipping zero terms"""
    acc = zero
    for point, scalar in zip(points, scalars):
        if int(scalar) == 0 or is_inf(point):
            continue
        acc = add(acc, multiply(point, int(scalar)))
    return acc


def _coord_int(c) -> int:
    return c if isinstance(c, int) else int(c.n)


def _fmt_coord(c) -> str:
    return f"0x{_coord_int(c):0{COORDINATE_HEX_DIGITS}x}"


def g1_to_affine(point) -> Tuple[int, int, bool]:
    if is_inf(point):
        return 0, 1, True
    x, y = normalize(point)
    return _coord_int(x), _coord_int(y), False


def g2_to_affine(point) -> Tuple[Tuple[int, int], Tuple[int, int], bool]:
    if is_inf(point):
        return (0, 0), (1, 0), True
    x, y = normalize(point)
    return (
        tuple(_coord_int(c) for c in x.coeffs),
        tuple(_coord_int(c) for c in y.coeffs),
        False,
    )


def render_g1(point) -> str:
    x, y, infinity = g1_to_affine(point)
    return (f"G1Affine {{ x: {_fmt_coord(x)}, y: {_fmt_coord(y)}, "
            f"infinity: {str(infinity).lower()} }}")


def render_g2(point) -> str:
    (x0, x1), (y0, y1), infinity = g2_to_affine(point)
    return (f"G2Affine {{ x: Fp2 {{ c0: {_fmt_coord(x0)}, c1: {_fmt_coord(x1)} }}, "
            f"y: Fp2 {{ c0: {_fmt_coord(y0)}, c1: {_fmt_coord(y1)} }}, "
            f"infinity: {str(infinity).lower()} }}")


# ============================================================================
# KEYS AND PROOFS
# ============================================================================


@dataclass
class VerifyingKey:
    alpha_g1: Any
    beta_g1: Any
    beta_g2: Any
    gamma_g2: Any
    delta_g1: Any
    delta_g2: Any
    # (beta * u_i(tau) + alpha * v_i(tau) + w_i(tau)) / gamma for public inputs
    ic: List[Any]


@dataclass
class ProvingKey:
    a_query: List[Any]
    b_g1_query: List[Any]
    b_g2_query: List[Any]
    # tau^i * t(tau) / delta
    h_query: List[Any]
    # (beta * u_i(tau) + alpha * v_i(tau) + w_i(tau)) / delta for aux variables
    l_query: List[Any]


@dataclass
class Parameters:
    """Groth16 setup output for one circuit shape"""
    vk: VerifyingKey
    pk: ProvingKey
    num_inputs: int
    num_aux: int
    domain_size: int
    generation_time: float = 0.0


@dataclass
class Proof:
    a: Any
    b: Any
    c: Any

    def render(self) -> str:
        """Debug-style dump of the affine proof points"""
        return (f"Proof {{ a: {render_g1(self.a)}, b: {render_g2(self.b)}, "
                f"c: {render_g1(self.c)} }}")

    def to_dict(self) -> Dict[str, Any]:
        ax, ay, _ = g1_to_affine(self.a)
        (bx0, bx1), (by0, by1), _ = g2_to_affine(self.b)
        cx, cy, _ = g1_to_affine(self.c)
        return {
            "a": [hex(ax), hex(ay)],
            "b": [[hex(bx0), hex(bx1)], [hex(by0), hex(by1)]],
            "c": [hex(cx), hex(cy)],
            "curve": "bls12_381",
            "protocol": "groth16",
        }

    def __str__(self) -> str:
        return self.render()


# ============================================================================
# QUADRATIC ARITHMETIC PROGRAM
# ============================================================================


@dataclass
class QAP:
    """R1CS matrices in column form over the domain 1..n"""
    num_inputs: int
    num_aux: int
    a_rows: List[LinearCombination]
    b_rows: List[LinearCombination]
    c_rows: List[LinearCombination]
    domain: Any = field(init=False)
    target: galois.Poly = field(init=False)

    def __post_init__(self):
        n = len(self.a_rows)
        self.domain = Fr(list(range(1, n + 1)))
        self.target = galois.Poly.Roots(self.domain)

    @property
    def size(self) -> int:
        return len(self.a_rows)

    @property
    def num_variables(self) -> int:
        return self.num_inputs + self.num_aux

    def column(self, var) -> int:
        return var.index if var.kind == INPUT else self.num_inputs + var.index

    @classmethod
    def from_constraint_system(cls, cs: ConstraintSystem) -> "QAP":
        a_rows = [c.a for c in cs.constraints]
        b_rows = [c.b for c in cs.constraints]
        c_rows = [c.c for c in cs.constraints]

        # input_i * 0 = 0 keeps the public input polynomials linearly independent
        for i in range(cs.num_inputs):
            a_rows.append(LinearCombination({Variable(INPUT, i): Fr(1)}))
            b_rows.append(LinearCombination.zero())
            c_rows.append(LinearCombination.zero())

        return cls(cs.num_inputs, cs.num_aux, a_rows, b_rows, c_rows)

    def lagrange_at(self, point: FieldElement) -> List[FieldElement]:
        """Lagrange basis polynomials of the domain evaluated at point"""
        values = []
        for k, xk in enumerate(self.domain):
            num = Fr(1)
            den = Fr(1)
            for m, xm in enumerate(self.domain):
                if m == k:
                    continue
                num = num * (point - xm)
                den = den * (xk - xm)
            values.append(num / den)
        return values

    def evaluate_columns(self, point: FieldElement) -> Tuple[List, List, List]:
        """u_j(point), v_j(point), w_j(point) for every variable column j"""
        basis = self.lagrange_at(point)
        width = self.num_variables
        u = [Fr(0)] * width
        v = [Fr(0)] * width
        w = [Fr(0)] * width

        for k, weight in enumerate(basis):
            for rows, out in ((self.a_rows, u), (self.b_rows, v), (self.c_rows, w)):
                for var, coeff in rows[k]:
                    j = self.column(var)
                    out[j] = out[j] + coeff * weight
        return u, v, w

    def row_values(self, rows: List[LinearCombination], assignment: List[FieldElement]) -> Any:
        values = []
        for lc in rows:
            total = Fr(0)
            for var, coeff in lc:
                total = total + coeff * assignment[self.column(var)]
            values.append(total)
        return Fr([int(value) for value in values])

    def quotient(self, assignment: List[FieldElement]) -> Tuple[galois.Poly, bool]:
        """h(x) = (A(x) * B(x) - C(x)) / t(x) and whether t divides exactly"""
        a_poly = galois.lagrange_poly(self.domain, self.row_values(self.a_rows, assignment))
        b_poly = galois.lagrange_poly(self.domain, self.row_values(self.b_rows, assignment))
        c_poly = galois.lagrange_poly(self.domain, self.row_values(self.c_rows, assignment))

        h, remainder = divmod(a_poly * b_poly - c_poly, self.target)
        return h, remainder == galois.Poly.Zero(Fr)


# ============================================================================
# SETUP AND PROVING
# ============================================================================


def generate_random_parameters(circuit: Circuit, rng, max_constraints: Optional[int] = None,
                               log: Optional[logging.Logger] = None) -> Parameters:
    """Run the Groth16 setup for the circuit's shape.

    Witness values are never requested. SynthesisError from the circuit
    propagates unchanged; degenerate randomness raises SetupError.
    """
    log = log or logger
    start_time = time.time()

    cs = ConstraintSystem(record_values=False, max_constraints=max_constraints)
    circuit.synthesize(cs)
    qap = QAP.from_constraint_system(cs)

    alpha = random_field_element(rng)
    beta = random_field_element(rng)
    gamma = random_field_element(rng)
    delta = random_field_element(rng)
    tau = random_field_element(rng)

    t_tau = qap.target(tau)
    if t_tau == 0:
        raise SetupError("tau lies in the evaluation domain")

    u, v, w = qap.evaluate_columns(tau)
    gamma_inv = Fr(1) / gamma
    delta_inv = Fr(1) / delta

    alpha_g1 = _scalar_mul(G1, alpha, Z1)
    beta_g1 = _scalar_mul(G1, beta, Z1)
    beta_g2 = _scalar_mul(G2, beta, Z2)
    gamma_g2 = _scalar_mul(G2, gamma, Z2)
    delta_g1 = _scalar_mul(G1, delta, Z1)
    delta_g2 = _scalar_mul(G2, delta, Z2)

    a_query = [_scalar_mul(G1, uj, Z1) for uj in u]
    b_g1_query = [_scalar_mul(G1, vj, Z1) for vj in v]
    b_g2_query = [_scalar_mul(G2, vj, Z2) for vj in v]

    # deg h <= n - 2
    h_query = []
    power = Fr(1)
    for _ in range(max(qap.size - 1, 0)):
        h_query.append(_scalar_mul(G1, power * t_tau * delta_inv, Z1))
        power = power * tau

    ic = []
    l_query = []
    for j in range(qap.num_variables):
        combined = beta * u[j] + alpha * v[j] + w[j]
        if j < qap.num_inputs:
            ic.append(_scalar_mul(G1, combined * gamma_inv, Z1))
        else:
            l_query.append(_scalar_mul(G1, combined * delta_inv, Z1))

    params = Parameters(
        vk=VerifyingKey(alpha_g1, beta_g1, beta_g2, gamma_g2, delta_g1, delta_g2, ic),
        pk=ProvingKey(a_query, b_g1_query, b_g2_query, h_query, l_query),
        num_inputs=qap.num_inputs,
        num_aux=qap.num_aux,
        domain_size=qap.size,
        generation_time=time.time() - start_time,
    )

    log.info(f"Generated random parameters for {qap.size} constraints "
             f"in {params.generation_time:.2f}s")
    return params


def create_random_proof(circuit: Circuit, params: Parameters, rng,
                        log: Optional[logging.Logger] = None) -> Proof:
    """Create a blinded Groth16 proof for a fully assigned circuit"""
    log = log or logger
    start_time = time.time()

    cs = ConstraintSystem(record_values=True)
    circuit.synthesize(cs)
    qap = QAP.from_constraint_system(cs)

    if (qap.num_inputs, qap.num_aux, qap.size) != (params.num_inputs, params.num_aux, params.domain_size):
        raise ProvingError(
            f"Circuit shape ({qap.num_inputs} inputs, {qap.num_aux} aux, {qap.size} constraints) "
            f"does not match parameters ({params.num_inputs}, {params.num_aux}, {params.domain_size})")

    assignment = cs.input_assignment + cs.aux_assignment

    h, exact = qap.quotient(assignment)
    if not exact:
        # The sum is not a public input, so an unsatisfied witness still yields a proof
        log.warning(f"Witness does not satisfy constraint: {cs.which_is_unsatisfied()}")
    h_coeffs = h.coefficients(len(params.pk.h_query), order="asc") if params.pk.h_query else []

    r = random_field_element(rng)
    s = random_field_element(rng)

    vk = params.vk
    pk = params.pk

    a = add(vk.alpha_g1, _lincomb(pk.a_query, assignment, Z1))
    a = add(a, _scalar_mul(vk.delta_g1, r, Z1))

    b_g2 = add(vk.beta_g2, _lincomb(pk.b_g2_query, assignment, Z2))
    b_g2 = add(b_g2, _scalar_mul(vk.delta_g2, s, Z2))

    b_g1 = add(vk.beta_g1, _lincomb(pk.b_g1_query, assignment, Z1))
    b_g1 = add(b_g1, _scalar_mul(vk.delta_g1, s, Z1))

    c = _lincomb(pk.l_query, assignment[qap.num_inputs:], Z1)
    c = add(c, _lincomb(pk.h_query, list(h_coeffs), Z1))
    c = add(c, _scalar_mul(a, s, Z1))
    c = add(c, _scalar_mul(b_g1, r, Z1))
    c = add(c, neg(_scalar_mul(vk.delta_g1, r * s, Z1)))

    log.info(f"Created random proof in {time.time() - start_time:.2f}s")
    return Proof(a=a, b=b_g2, c=c)
