"""PBKDF2 admin credentials in the literal syntax CouchDB accepts in its ``[admins]`` section.

CouchDB stores hashed admins as ``-<algorithm>-<derived key hex>,<salt hex>,<iterations>``.
Releases before 3.4 only verify ``pbkdf2`` (HMAC-SHA1, 20 byte key); 3.4 and later also accept
``pbkdf2:sha256``.
"""

import hashlib
import secrets
from dataclasses import dataclass

from sillon.exceptions import InvalidHashError

SALT_BYTES = 16


@dataclass(frozen=True)
class HashScheme:
    algorithm: str
    digest: str
    key_length: int
    iterations: int


PBKDF2_SHA1 = HashScheme(algorithm="pbkdf2", digest="sha1", key_length=20, iterations=10)
PBKDF2_SHA256 = HashScheme(algorithm="pbkdf2:sha256", digest="sha256", key_length=32, iterations=600_000)

SCHEMES: dict[str, HashScheme] = {scheme.algorithm: scheme for scheme in (PBKDF2_SHA1, PBKDF2_SHA256)}


@dataclass(frozen=True)
class HashRecord:
    algorithm: str
    derived_key_hex: str
    salt_hex: str
    iterations: int

    def render(self) -> str:
        return f"-{self.algorithm}-{self.derived_key_hex},{self.salt_hex},{self.iterations}"


def _version_tuple(version: str) -> tuple[int, ...]:
    parts: list[int] = []
    for part in version.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


def scheme_for_version(version: str) -> HashScheme:
    """Pick the strongest scheme the given CouchDB release can verify."""
    if _version_tuple(version) >= (3, 4):
        return PBKDF2_SHA256
    return PBKDF2_SHA1


class PasswordHasher:
    def __init__(self, scheme: HashScheme = PBKDF2_SHA256):
        self.scheme = scheme

    @classmethod
    def for_version(cls, version: str) -> "PasswordHasher":
        return cls(scheme_for_version(version))

    def hash(self, plaintext: str, salt: bytes | None = None) -> HashRecord:
        salt = salt if salt is not None else secrets.token_bytes(SALT_BYTES)
        # CouchDB feeds the hex encoded salt to PBKDF2, not the raw bytes
        salt_hex = salt.hex()
        derived = hashlib.pbkdf2_hmac(
            self.scheme.digest,
            plaintext.encode(),
            salt_hex.encode(),
            self.scheme.iterations,
            dklen=self.scheme.key_length,
        )
        return HashRecord(
            algorithm=self.scheme.algorithm,
            derived_key_hex=derived.hex(),
            salt_hex=salt_hex,
            iterations=self.scheme.iterations,
        )

    def verify(self, plaintext: str, literal: str) -> bool:
        record = decode(literal)
        scheme = SCHEMES[record.algorithm]
        derived = hashlib.pbkdf2_hmac(
            scheme.digest,
            plaintext.encode(),
            record.salt_hex.encode(),
            record.iterations,
            dklen=len(record.derived_key_hex) // 2,
        )
        return secrets.compare_digest(derived.hex(), record.derived_key_hex)


def decode(literal: str) -> HashRecord:
    """Split a ``-<algorithm>-<key>,<salt>,<iterations>`` literal back into its parts."""
    if not literal.startswith("-"):
        raise InvalidHashError(literal)
    algorithm, sep, payload = literal[1:].partition("-")
    if not sep or algorithm not in SCHEMES:
        raise InvalidHashError(literal)
    fields = payload.split(",")
    if len(fields) != 3:
        raise InvalidHashError(literal)
    derived_key_hex, salt_hex, iterations = fields
    try:
        bytes.fromhex(derived_key_hex)
        bytes.fromhex(salt_hex)
        iteration_count = int(iterations)
    except ValueError as e:
        raise InvalidHashError(literal) from e
    return HashRecord(
        algorithm=algorithm,
        derived_key_hex=derived_key_hex,
        salt_hex=salt_hex,
        iterations=iteration_count,
    )
