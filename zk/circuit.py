"""
Rank-one constraint systems and the sum circuit.

A ConstraintSystem collects variables and constraints of the form
A * B = C, where A, B and C are linear combinations of variables. The same
circuit is synthesized twice during proof generation: once into a
shape-only system for setup (witness values are never requested) and once
into a recording system for proving.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import SynthesisError
from .field import Fr, FieldElement

INPUT = "input"
AUX = "aux"


@dataclass(frozen=True)
class Variable:
    """Reference to a public input or an auxiliary (witness) variable"""
    kind: str
    index: int


ONE = Variable(INPUT, 0)


def _coefficient(coeff) -> FieldElement:
    # ints are taken modulo r, so -1 is the field element r - 1
    if isinstance(coeff, int):
        return Fr(coeff % Fr.order)
    return coeff


class LinearCombination:
    """Sparse map from variables to field coefficients"""

    def __init__(self, terms: Optional[Dict[Variable, FieldElement]] = None):
        self.terms: Dict[Variable, FieldElement] = dict(terms or {})

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    def _with_term(self, var: Variable, coeff: FieldElement) -> "LinearCombination":
        terms = dict(self.terms)
        updated = terms.get(var, Fr(0)) + coeff
        if updated == 0:
            terms.pop(var, None)
        else:
            terms[var] = updated
        return LinearCombination(terms)

    def __add__(self, other):
        if isinstance(other, Variable):
            return self._with_term(other, Fr(1))
        if isinstance(other, tuple):
            coeff, var = other
            return self._with_term(var, _coefficient(coeff))
        if isinstance(other, LinearCombination):
            result = self
            for var, coeff in other.terms.items():
                result = result._with_term(var, coeff)
            return result
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Variable):
            return self._with_term(other, -Fr(1))
        if isinstance(other, tuple):
            coeff, var = other
            return self._with_term(var, -_coefficient(coeff))
        return NotImplemented

    def __iter__(self) -> Iterator[Tuple[Variable, FieldElement]]:
        return iter(self.terms.items())

    def __len__(self) -> int:
        return len(self.terms)

    def __repr__(self) -> str:
        parts = [f"{int(c)}*{v.kind}[{v.index}]" for v, c in self.terms.items()]
        return "LinearCombination(" + " + ".join(parts) + ")"


@dataclass
class Constraint:
    name: str
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination


LcBuilder = Callable[[LinearCombination], LinearCombination]


class ConstraintSystem:
    """R1CS builder.

    With record_values=False the system only captures the circuit shape and
    never calls value functions, which is what parameter generation needs.
    """

    def __init__(self, record_values: bool = True, max_constraints: Optional[int] = None):
        self.record_values = record_values
        self.max_constraints = max_constraints

        self.input_names: List[str] = ["ONE"]
        self.aux_names: List[str] = []
        self.input_assignment: List[FieldElement] = [Fr(1)] if record_values else []
        self.aux_assignment: List[FieldElement] = []
        self.constraints: List[Constraint] = []
        self._names = {"ONE"}

    @staticmethod
    def one() -> Variable:
        return ONE

    @property
    def num_inputs(self) -> int:
        return len(self.input_names)

    @property
    def num_aux(self) -> int:
        return len(self.aux_names)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def _claim_name(self, name: str):
        if name in self._names:
            raise SynthesisError(f"Duplicate name in constraint system: {name}")
        self._names.add(name)

    def _evaluate(self, name: str, value_fn: Callable[[], Optional[FieldElement]]) -> FieldElement:
        try:
            value = value_fn()
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"Failed to compute value for {name}: {e}") from e

        if value is None:
            raise SynthesisError(f"Assignment missing for {name}")
        if isinstance(value, int):
            value = Fr(value % Fr.order)
        return value

    def alloc(self, name: str, value_fn: Callable[[], Optional[FieldElement]]) -> Variable:
        """Allocate an auxiliary (private) variable"""
        self._claim_name(name)
        if self.record_values:
            self.aux_assignment.append(self._evaluate(name, value_fn))
        self.aux_names.append(name)
        return Variable(AUX, len(self.aux_names) - 1)

    def alloc_input(self, name: str, value_fn: Callable[[], Optional[FieldElement]]) -> Variable:
        """Allocate a public input variable"""
        self._claim_name(name)
        if self.record_values:
            self.input_assignment.append(self._evaluate(name, value_fn))
        self.input_names.append(name)
        return Variable(INPUT, len(self.input_names) - 1)

    def _check_lc(self, name: str, lc: LinearCombination):
        if not isinstance(lc, LinearCombination):
            raise SynthesisError(f"Constraint {name} did not produce a linear combination")
        for var, _ in lc:
            limit = self.num_inputs if var.kind == INPUT else self.num_aux
            if var.kind not in (INPUT, AUX) or not 0 <= var.index < limit:
                raise SynthesisError(f"Constraint {name} references unknown variable {var}")

    def enforce(self, name: str, a_fn: LcBuilder, b_fn: LcBuilder, c_fn: LcBuilder):
        """Add the constraint a * b = c"""
        self._claim_name(name)
        if self.max_constraints is not None and self.num_constraints >= self.max_constraints:
            raise SynthesisError(
                f"Constraint limit of {self.max_constraints} exceeded at {name}")

        a = a_fn(LinearCombination.zero())
        b = b_fn(LinearCombination.zero())
        c = c_fn(LinearCombination.zero())
        for lc in (a, b, c):
            self._check_lc(name, lc)

        self.constraints.append(Constraint(name, a, b, c))

    def eval_lc(self, lc: LinearCombination) -> FieldElement:
        if not self.record_values:
            raise SynthesisError("Constraint system holds no assignment")

        total = Fr(0)
        for var, coeff in lc:
            source = self.input_assignment if var.kind == INPUT else self.aux_assignment
            total = total + coeff * source[var.index]
        return total

    def which_is_unsatisfied(self) -> Optional[str]:
        for constraint in self.constraints:
            lhs = self.eval_lc(constraint.a) * self.eval_lc(constraint.b)
            if lhs != self.eval_lc(constraint.c):
                return constraint.name
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None


class Circuit:
    """Base class for circuits synthesized into a ConstraintSystem"""

    def synthesize(self, cs: ConstraintSystem):
        raise NotImplementedError


@dataclass(eq=False)
class SumCircuit(Circuit):
    """Encodes a + b = expected_sum with every value kept private.

    Values may be None when the circuit is only used for its shape.
    """
    a: Optional[FieldElement] = None
    b: Optional[FieldElement] = None
    expected_sum: Optional[FieldElement] = None

    def _sum(self) -> Optional[FieldElement]:
        if self.a is None or self.b is None:
            return None
        return self.a + self.b

    def synthesize(self, cs: ConstraintSystem):
        a_var = cs.alloc("first addend", lambda: self.a)
        b_var = cs.alloc("second addend", lambda: self.b)
        expected_var = cs.alloc("expected sum", lambda: self.expected_sum)

        # Temporary variable for the sum
        sum_var = cs.alloc("sum", self._sum)

        # (a + b) * 1 = sum
        cs.enforce(
            "sum constraint",
            lambda lc: lc + a_var + b_var,
            lambda lc: lc + cs.one(),
            lambda lc: lc + sum_var,
        )

        # sum * 1 = expected_sum
        cs.enforce(
            "expected sum constraint",
            lambda lc: lc + sum_var,
            lambda lc: lc + cs.one(),
            lambda lc: lc + expected_var,
        )
