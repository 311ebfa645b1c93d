"""Error taxonomy for proving and verification.

    StarkError
    ├── MalformedTrace          rejected before proving starts
    └── ProofInvalid            every verification failure
        ├── ConfigMismatch      proof built under a different configuration
        ├── ConstraintViolation trace does not satisfy the AIR
        ├── TranscriptMismatch  challenger-derived values disagree (PoW, Merkle, FRI)
        └── MalformedProof      proof has the wrong shape
"""


class StarkError(Exception):
    """Base class for all proving-system errors."""


class MalformedTrace(StarkError):
    """Trace shape does not match the AIR or the prover's domain requirements."""


class ProofInvalid(StarkError):
    """Verification rejected the proof."""


class ConfigMismatch(ProofInvalid):
    """Prover and verifier configurations differ."""


class ConstraintViolation(ProofInvalid):
    """A first-row, transition or last-row constraint does not hold.

    Attributes:
        row: Offending trace row when known (debug checker), else None
        kind: 'first_row', 'transition', 'last_row' or None when only the
            combined out-of-domain check failed
    """

    def __init__(self, message: str, row: int | None = None, kind: str | None = None):
        super().__init__(message)
        self.row = row
        self.kind = kind


class TranscriptMismatch(ProofInvalid):
    """Challenges derived by the verifier do not match the prover's commitments."""


class MalformedProof(ProofInvalid):
    """Proof structure is inconsistent with the configuration or the AIR."""
