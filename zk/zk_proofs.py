"""
Sum-relation proof generation.

Two input strings are hashed into the BLS12-381 scalar field, their sum is
computed, and a Groth16 proof is produced for the circuit
(a + b) * 1 = sum, sum * 1 = expected_sum. Parameters are generated per
call from fresh randomness and discarded afterwards.
"""

import asyncio
import contextlib
import logging
import secrets
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from config.config import ProofConfig

from .circuit import Circuit, SumCircuit
from .errors import ProvingError, SetupError, ZKError
from .field import FieldElement, FieldMapper
from .groth16 import Parameters, Proof, create_random_proof, generate_random_parameters

logger = logging.getLogger(__name__)

# Shared pool for async callers; each call still builds its own state
_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="proof")


@dataclass
class ProofArtifact:
    """Container for proof and metadata"""
    proof: Proof
    rendered: str
    first_value: FieldElement
    second_value: FieldElement
    expected_sum: FieldElement
    setup_time: float
    proving_time: float
    generation_time: float
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'proof': self.proof.to_dict(),
            'rendered': self.rendered,
            'setup_time': self.setup_time,
            'proving_time': self.proving_time,
            'generation_time': self.generation_time,
            'timestamp': self.timestamp
        }


class ProofGenerator:
    """Hash-to-field, per-call setup and proving for the sum circuit.

    The random source and logger are explicit dependencies. rng_factory is
    called once per proof so no random state is shared between calls;
    pass a seeded random.Random factory for reproducible output.
    """

    def __init__(self, config: Optional[ProofConfig] = None,
                 rng_factory: Callable[[], Any] = secrets.SystemRandom,
                 logger: Optional[logging.Logger] = None,
                 monitor=None,
                 circuit_factory: Callable[..., Circuit] = SumCircuit):
        self.config = config or ProofConfig()
        self.rng_factory = rng_factory
        self.logger = logger or logging.getLogger(__name__)
        self.monitor = monitor if self.config.enable_performance_monitoring else None
        self.circuit_factory = circuit_factory
        self.mapper = FieldMapper(self.config.field_reduction, logger=self.logger)

    def _stage(self, name: str):
        if self.monitor is None:
            return contextlib.nullcontext()
        return self.monitor.start_operation(name)

    def _setup(self, circuit: Circuit, rng) -> Parameters:
        try:
            return generate_random_parameters(
                circuit, rng,
                max_constraints=self.config.max_constraints,
                log=self.logger
            )
        except SetupError:
            raise
        except (ZKError, ValueError, ArithmeticError) as e:
            raise SetupError(f"Error generating random parameters: {e}") from e

    def _prove(self, circuit: Circuit, params: Parameters, rng) -> Proof:
        try:
            return create_random_proof(circuit, params, rng, log=self.logger)
        except ProvingError:
            raise
        except (ZKError, ValueError, ArithmeticError) as e:
            raise ProvingError(f"Error creating random proof: {e}") from e

    def prove(self, raw_a: str, raw_b: str, rng=None) -> ProofArtifact:
        """Generate a proof and keep its metadata"""
        start_time = time.time()
        rng = rng if rng is not None else self.rng_factory()

        with self._stage("hash_to_field"):
            a = self.mapper.map(raw_a.encode("utf-8"))
            b = self.mapper.map(raw_b.encode("utf-8"))

        expected_sum = a + b

        with self._stage("setup"):
            params = self._setup(self.circuit_factory(a, b, expected_sum), rng)

        # Recreate the circuit for the proof
        with self._stage("prove"):
            proving_start = time.time()
            proof = self._prove(self.circuit_factory(a, b, expected_sum), params, rng)
            proving_time = time.time() - proving_start

        rendered = proof.render()
        generation_time = time.time() - start_time
        self.logger.info(f"Generated proof in {generation_time:.2f}s")

        return ProofArtifact(
            proof=proof,
            rendered=rendered,
            first_value=a,
            second_value=b,
            expected_sum=expected_sum,
            setup_time=params.generation_time,
            proving_time=proving_time,
            generation_time=generation_time
        )

    def generate_proof(self, raw_a: str, raw_b: str) -> str:
        return self.prove(raw_a, raw_b).rendered


def generate_proof(sha_string: str, input_string: str,
                   config: Optional[ProofConfig] = None) -> str:
    """Prove knowledge of two preimages whose field images sum to a total"""
    return ProofGenerator(config).generate_proof(sha_string, input_string)


async def async_generate_proof(sha_string: str, input_string: str,
                               generator: Optional[ProofGenerator] = None) -> str:
    """Run proof generation off the event loop"""
    generator = generator or ProofGenerator()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _executor, generator.generate_proof, sha_string, input_string)
