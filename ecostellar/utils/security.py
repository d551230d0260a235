"""
Security utilities for masking sensitive data in logs.

Provides functions to safely mask sensitive information like:
- Stellar account and contract addresses
- Transaction hashes
"""


def mask_address(address: str | None) -> str:
    """
    Mask Stellar address for logging: GABC...WXYZ

    Args:
        address: Account (G...) or contract (C...) address to mask

    Returns:
        Masked address showing first 4 and last 4 characters

    Examples:
        >>> mask_address("GBRPYHIL2CI3FNQ4BXLFMNDLFJUNPU2HY3ZMFSHONUCEOASW7QC7OX2H")
        'GBRP...OX2H'
        >>> mask_address(None)
        '***'
        >>> mask_address("short")
        '***'
    """
    if not address or len(address) < 10:
        return "***"
    return f"{address[:4]}...{address[-4:]}"


def mask_tx_hash(tx_hash: str | None) -> str:
    """
    Mask transaction hash for logging.

    Mock hashes are short and carry no secret, they are returned as-is.

    Args:
        tx_hash: Transaction hash to mask

    Returns:
        Masked hash showing first 8 and last 6 characters

    Examples:
        >>> mask_tx_hash("a" * 58 + "abcdef")
        'aaaaaaaa...abcdef'
        >>> mask_tx_hash("mock_mint_1700000000000")
        'mock_mint_1700000000000'
    """
    if not tx_hash:
        return "***"
    if tx_hash.startswith("mock_") or len(tx_hash) < 16:
        return tx_hash
    return f"{tx_hash[:8]}...{tx_hash[-6:]}"
