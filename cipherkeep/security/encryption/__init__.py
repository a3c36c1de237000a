#!/usr/bin/env python3
# cipherkeep/security/encryption/__init__.py
from __future__ import annotations
"""
Encryption package.

Import submodules explicitly, e.g.:

from cipherkeep.security.encryption.envelope import seal, unseal, KdfParams
"""

__all__: list[str] = []
