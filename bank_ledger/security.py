"""
Credential hashing utilities

Account PINs are stored only as SHA-256 digests. Comparison uses
hmac.compare_digest so a mismatch takes the same time wherever it occurs.
"""

import hashlib
import hmac
import re
from typing import Optional

DEFAULT_CREDENTIAL_PATTERN = r"^[0-9]{4,6}$"


def hash_credential(credential: str) -> str:
    """SHA-256 hex digest of a credential"""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()


def is_valid_credential(credential: Optional[str], pattern: str = DEFAULT_CREDENTIAL_PATTERN) -> bool:
    """Check a credential against the PIN pattern (4-6 digits by default)"""
    if not isinstance(credential, str):
        return False
    return re.fullmatch(pattern, credential, re.ASCII) is not None


def verify_credential(credential: Optional[str], credential_hash: str) -> bool:
    """Compare a plaintext credential against a stored digest"""
    if not isinstance(credential, str):
        return False
    return hmac.compare_digest(hash_credential(credential), credential_hash)
