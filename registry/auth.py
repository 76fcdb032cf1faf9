"""Wallet signature verification and the messages clients are asked to sign."""

from typing import Callable, Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from common.logging_config import get_logger
from registry.config import DELETE_ROUTE

logger = get_logger(__name__)

SignatureVerifier = Callable[[str, Union[str, bytes], str], bool]


def build_publish_message(address: str, dataset_id: str) -> str:
    """
    Build the message a client signs to publish a dataset.

    Args:
        address: Address exactly as the client submitted it
        dataset_id: ID of the dataset being published

    Returns:
        Address followed directly by the dataset ID
    """
    return f"{address}{dataset_id}"


def build_delete_message(address: str, storage_id: str) -> str:
    """
    Build the message a client signs to delete a storage group.

    The message is the logical request path with its identifying query
    parameters, using the address exactly as the client submitted it.
    """
    return f"{DELETE_ROUTE}?address={address}&storage_id={storage_id}"


def recover_signer(message: str, signature: Union[str, bytes]) -> Optional[str]:
    """
    Recover the address that produced a personal-sign signature.

    Args:
        message: Plain text message that was signed
        signature: 65-byte signature, as bytes or a hex string

    Returns:
        Checksummed signer address, or None if the signature is malformed
    """
    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        logger.debug(f"Could not recover signer from signature: {type(e).__name__}")
        return None


def verify_signature(message: str, signature: Union[str, bytes], claimed_address: str) -> bool:
    """
    Check that a signature over message was produced by claimed_address.

    Args:
        message: Plain text message that was signed
        signature: Signature produced by the wallet
        claimed_address: Address the caller claims to own

    Returns:
        True if the recovered signer equals claimed_address (case-insensitive)
    """
    if not message or not signature or not claimed_address:
        return False

    signer = recover_signer(message, signature)
    if signer is None:
        return False

    return signer.lower() == claimed_address.lower()
