"""
Zero-knowledge proof of a sum relation between two hashed inputs,
using Groth16 over BLS12-381.
"""

from .circuit import (
    Circuit,
    ConstraintSystem,
    LinearCombination,
    SumCircuit,
    Variable,
)
from .errors import (
    FieldConversionError,
    MissingInputError,
    ProvingError,
    SetupError,
    SynthesisError,
    ZKError,
)
from .field import (
    SCALAR_FIELD_ORDER,
    FieldElement,
    FieldMapper,
    Fr,
    field_from_bytes,
    field_to_bytes,
    hash_to_field,
)
from .groth16 import (
    Parameters,
    Proof,
    create_random_proof,
    generate_random_parameters,
)
from .zk_proofs import (
    ProofArtifact,
    ProofGenerator,
    async_generate_proof,
    generate_proof,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    'ProofGenerator',
    'ProofArtifact',
    'FieldMapper',
    'SumCircuit',
    'Circuit',
    'ConstraintSystem',
    'LinearCombination',
    'Variable',
    'Parameters',
    'Proof',

    # Field
    'Fr',
    'FieldElement',
    'SCALAR_FIELD_ORDER',
    'hash_to_field',
    'field_to_bytes',
    'field_from_bytes',

    # Operations
    'generate_proof',
    'async_generate_proof',
    'generate_random_parameters',
    'create_random_proof',

    # Exceptions
    'ZKError',
    'FieldConversionError',
    'SynthesisError',
    'SetupError',
    'ProvingError',
    'MissingInputError',
]
