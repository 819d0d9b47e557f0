"""
Scalar field arithmetic and hash-to-field mapping for BLS12-381.

Field elements are galois FieldArray scalars over GF(r), where r is the
order of the BLS12-381 G1/G2 subgroups. Arbitrary byte strings are mapped
into the field by hashing with SHA-256 and reducing modulo r.
"""

import hashlib
import logging
from typing import Optional

import galois
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from py_ecc.optimized_bls12_381 import curve_order

from .errors import FieldConversionError

logger = logging.getLogger(__name__)

# BLS12-381 scalar field order r (255 bits)
SCALAR_FIELD_ORDER = curve_order

# Canonical fixed-width encoding of a field element
FIELD_ELEMENT_BYTES = 32

# 7 generates the multiplicative group of GF(r); passing it skips factoring r - 1
Fr = galois.GF(SCALAR_FIELD_ORDER, primitive_element=7, verify=False)
FieldElement = Fr

REDUCTION_MODULAR = "modular"
REDUCTION_WIDE = "wide"
SUPPORTED_REDUCTIONS = (REDUCTION_MODULAR, REDUCTION_WIDE)

WIDE_DOMAIN_TAG = b"sum-proof/hash_to_field/v1"


def field_to_bytes(element: FieldElement) -> bytes:
    """Canonical 32-byte big-endian encoding"""
    return int(element).to_bytes(FIELD_ELEMENT_BYTES, "big")


def field_from_bytes(data: bytes) -> FieldElement:
    """Decode a canonical 32-byte big-endian encoding.

    Raises FieldConversionError when the input has the wrong width or
    encodes an integer outside [0, r).
    """
    if len(data) != FIELD_ELEMENT_BYTES:
        raise FieldConversionError(
            f"Expected {FIELD_ELEMENT_BYTES} bytes, got {len(data)}")

    value = int.from_bytes(data, "big")
    try:
        return Fr(value)
    except ValueError as e:
        raise FieldConversionError("Failed to convert to scalar") from e


def random_field_element(rng, nonzero: bool = True) -> FieldElement:
    """Sample a field element from an injected random source"""
    low = 1 if nonzero else 0
    return Fr(rng.randrange(low, SCALAR_FIELD_ORDER))


class FieldMapper:
    """Maps byte strings into GF(r).

    The default "modular" reduction hashes with SHA-256 and reduces the
    256-bit digest modulo r, which slightly favours low residues. The
    "wide" reduction expands the input to 64 bytes with HKDF-SHA256 first,
    so the bias after reduction is negligible.
    """

    def __init__(self, reduction: str = REDUCTION_MODULAR,
                 logger: Optional[logging.Logger] = None):
        if reduction not in SUPPORTED_REDUCTIONS:
            raise ValueError(f"Unsupported field reduction: {reduction}")
        self.reduction = reduction
        self.logger = logger or logging.getLogger(__name__)

    def digest(self, data: bytes) -> bytes:
        if self.reduction == REDUCTION_WIDE:
            hkdf = HKDF(
                algorithm=hashes.SHA256(),
                length=64,
                salt=None,
                info=WIDE_DOMAIN_TAG,
                backend=default_backend()
            )
            return hkdf.derive(WIDE_DOMAIN_TAG + bytes(data))

        return hashlib.sha256(data).digest()

    def from_digest(self, digest: bytes) -> FieldElement:
        """Reduce a big-endian digest modulo r and encode it canonically"""
        value = int.from_bytes(digest, "big") % SCALAR_FIELD_ORDER

        try:
            encoded = value.to_bytes(FIELD_ELEMENT_BYTES, "big")
        except OverflowError as e:
            self.logger.info("Failed to convert to Scalar")
            raise FieldConversionError("Failed to convert to scalar") from e

        try:
            element = field_from_bytes(encoded)
        except FieldConversionError:
            self.logger.info("Failed to convert to Scalar")
            raise

        self.logger.info("Successfully converted to Scalar")
        return element

    def map(self, data: bytes) -> FieldElement:
        return self.from_digest(self.digest(data))


_default_mapper = FieldMapper()


def hash_to_field(data: bytes) -> FieldElement:
    """SHA-256 hash-to-field with the default modular reduction"""
    return _default_mapper.map(data)
