import asyncio
import random

import pytest

from handler import extract_inputs, handle_event, handle_event_async
from zk.errors import MissingInputError, ProvingError, SetupError
from zk.zk_proofs import ProofGenerator


class StubGenerator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def generate_proof(self, sha, input_data):
        self.calls.append((sha, input_data))
        if self.error:
            raise self.error
        return self.result


def event(sha="abc", input_data="def"):
    return {"event": {"sha": sha, "input_data": input_data}}


def test_extract_inputs():
    assert extract_inputs(event()) == ("abc", "def")


@pytest.mark.parametrize("bad_event", [
    {},
    {"event": None},
    {"event": {"sha": "abc"}},
    {"event": {"input_data": "def"}},
    {"event": {"sha": 1, "input_data": "def"}},
    "not a dict",
])
def test_missing_inputs(bad_event):
    with pytest.raises(MissingInputError, match="Missing SHA or input data"):
        handle_event(bad_event, StubGenerator("unused"))


def test_success_response():
    stub = StubGenerator("Proof { ... }")
    assert handle_event(event(), stub) == {"proof": "Proof { ... }"}
    assert stub.calls == [("abc", "def")]


def test_core_errors_are_mapped(caplog):
    cause = SetupError("Error generating random parameters: boom")
    with pytest.raises(ProvingError, match="Error generating proof") as excinfo:
        handle_event(event(), StubGenerator(error=cause))

    assert excinfo.value.__cause__ is cause
    assert "boom" in caplog.text


def test_end_to_end_event():
    generator = ProofGenerator(rng_factory=lambda: random.Random(21))
    response = handle_event(event(), generator)
    assert response["proof"].startswith("Proof { a: G1Affine")


def test_async_handler_missing_inputs():
    with pytest.raises(MissingInputError):
        asyncio.run(handle_event_async({"event": {}}))
