"""Port interfaces for the SifSign application layer.

These protocol interfaces define contracts for adapters.
Services depend on these ports, never on concrete implementations.
"""

__all__ = [
    "PromptPort",
    "YesNo",
    "KeyGenPort",
    "KeyHandle",
    "KeystorePort",
    "KeyserverOp",
    "ClientOptions",
    "VerifierPort",
    "VerificationReport",
    "ObjectResult",
]

from sifsign.app.ports.keygen import KeyGenPort, KeyHandle
from sifsign.app.ports.keystore import ClientOptions, KeyserverOp, KeystorePort
from sifsign.app.ports.prompt import PromptPort, YesNo
from sifsign.app.ports.verifier import ObjectResult, VerificationReport, VerifierPort
