import random
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from zk.circuit import SumCircuit  # noqa: E402
from zk.field import hash_to_field  # noqa: E402
from zk.groth16 import generate_random_parameters  # noqa: E402

DOCKER_SHA = "aea7a9e96d97f78c076939c22abcb171d624f1b9c41de4dc14611f4f01506950"
TXN_HASH = "0xf94c20fbc81d4feb8c21a0c9dad46994fa65e7d0c6341aa8dcf95ba38b970e20"


@pytest.fixture(scope="module")
def sum_circuit():
    a = hash_to_field(DOCKER_SHA.encode())
    b = hash_to_field(TXN_HASH.encode())
    return SumCircuit(a, b, a + b)


@pytest.fixture(scope="module")
def params(sum_circuit):
    """Parameters for the sum circuit from a seeded source"""
    return generate_random_parameters(sum_circuit, random.Random(1234))
