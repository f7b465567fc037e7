"""Application layer for SifSign.

This layer holds the decision logic for key provisioning and verification.
All side effects are delegated to adapters via port interfaces.
"""

__all__ = [
    "KeyPairService",
    "ParameterCollector",
    "VerifyService",
]

from sifsign.app.keypair_service import KeyPairService, ParameterCollector
from sifsign.app.verify_service import VerifyService
