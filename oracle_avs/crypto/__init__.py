"""Attestation primitives: the process-wide signer and the task-proof hash."""

from oracle_avs.crypto.proof import (
    PROOF_ABI_TYPES,
    build_task_proof,
    encode_task_proof,
    hash_task_proof,
    recover_signer,
    verify_task_proof,
)
from oracle_avs.crypto.signer import Signer

__all__ = [
    "PROOF_ABI_TYPES",
    "Signer",
    "build_task_proof",
    "encode_task_proof",
    "hash_task_proof",
    "recover_signer",
    "verify_task_proof",
]
