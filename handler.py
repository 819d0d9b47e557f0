"""
Request shell around the proof generator.

Events carry the two inputs under event["event"]["sha"] and
event["event"]["input_data"]; the response is {"proof": <rendered proof>}.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from zk.errors import MissingInputError, ProvingError, ZKError
from zk.zk_proofs import ProofGenerator, async_generate_proof

logger = logging.getLogger(__name__)


def extract_inputs(event: Dict[str, Any]) -> Tuple[str, str]:
    payload = event.get("event") if isinstance(event, dict) else None
    if not isinstance(payload, dict):
        raise MissingInputError("Missing SHA or input data")

    sha = payload.get("sha")
    input_data = payload.get("input_data")
    if not isinstance(sha, str) or not isinstance(input_data, str):
        raise MissingInputError("Missing SHA or input data")

    return sha, input_data


def handle_event(event: Dict[str, Any], generator: Optional[ProofGenerator] = None) -> Dict[str, str]:
    sha, input_data = extract_inputs(event)
    generator = generator or ProofGenerator()

    try:
        proof = generator.generate_proof(sha, input_data)
    except ZKError as e:
        logger.error(f"Error generating proof: {e!r}")
        raise ProvingError("Error generating proof") from e

    return {"proof": proof}


async def handle_event_async(event: Dict[str, Any],
                             generator: Optional[ProofGenerator] = None) -> Dict[str, str]:
    sha, input_data = extract_inputs(event)

    try:
        proof = await async_generate_proof(sha, input_data, generator)
    except ZKError as e:
        logger.error(f"Error generating proof: {e!r}")
        raise ProvingError("Error generating proof") from e

    return {"proof": proof}
