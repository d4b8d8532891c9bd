from __future__ import annotations

from typing import Tuple

from eth_abi import encode
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak, to_checksum_address

from oracle_avs.crypto.signer import Signer
from oracle_avs.protocol import TaskProof

# The aggregator re-derives this exact encoding to check the signature.
# Order and types must never change.
PROOF_ABI_TYPES: Tuple[str, ...] = ("string", "bytes", "address", "int32")


def encode_task_proof(
    proof_of_task: str,
    result: bytes,
    performer_address: str,
    task_definition_id: int,
) -> bytes:
    """ABI-encode `(proofOfTask, result, performerAddress, taskDefinitionId)` as function params."""
    return encode(
        list(PROOF_ABI_TYPES),
        [proof_of_task, bytes(result), to_checksum_address(performer_address), int(task_definition_id)],
    )


def hash_task_proof(
    proof_of_task: str,
    result: bytes,
    performer_address: str,
    task_definition_id: int,
) -> bytes:
    """Keccak-256 of the canonical task-proof encoding."""
    return keccak(encode_task_proof(proof_of_task, result, performer_address, task_definition_id))


def build_task_proof(
    signer: Signer,
    *,
    proof_of_task: str,
    result: bytes,
    task_definition_id: int,
) -> TaskProof:
    """Hash and sign a task result on behalf of the signer's address."""
    performer = signer.address
    message_hash = hash_task_proof(proof_of_task, result, performer, task_definition_id)
    return TaskProof(
        task_definition_id=task_definition_id,
        proof_of_task=proof_of_task,
        result=bytes(result),
        performer_address=performer,
        signature=signer.sign(message_hash),
    )


def recover_signer(message_hash: bytes, signature: bytes) -> str:
    """Recover the checksummed address that produced `signature` over `message_hash`."""
    if len(signature) != 65:
        raise ValueError(f"expected a 65-byte signature, got {len(signature)} bytes")
    v = signature[64]
    if v >= 27:
        v -= 27
    sig = keys.Signature(signature_bytes=bytes(signature[:64]) + bytes([v]))
    return sig.recover_public_key_from_msg_hash(message_hash).to_checksum_address()


def verify_task_proof(proof: TaskProof) -> bool:
    message_hash = hash_task_proof(
        proof.proof_of_task, proof.result, proof.performer_address, proof.task_definition_id
    )
    try:
        recovered = recover_signer(message_hash, proof.signature)
    except (ValueError, BadSignature, ValidationError):
        return False
    return recovered == to_checksum_address(proof.performer_address)
