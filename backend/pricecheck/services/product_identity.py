"""Product identity - stable numeric IDs from barcodes or name/store pairs"""
from typing import Optional

DJB2_SEED = 5381
UINT32_MASK = 0xFFFFFFFF


def djb2_hash(text: str) -> int:
    """
    DJB2 over UTF-16 code units, wrapped to an unsigned 32-bit integer.

    Code units (not code points) are hashed so IDs match the ones the
    browser client computes with charCodeAt().
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    accumulator = DJB2_SEED
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        accumulator = (accumulator * 33 + code_unit) & UINT32_MASK
    return accumulator


def identity_key(
    barcode: Optional[str] = None,
    product_name: Optional[str] = None,
    store_name: Optional[str] = None,
) -> str:
    """String the identity is hashed from: the barcode, else 'name-store'."""
    if barcode:
        return barcode
    return f"{product_name or ''}-{store_name or ''}"


def compute_identity(
    barcode: Optional[str] = None,
    product_name: Optional[str] = None,
    store_name: Optional[str] = None,
) -> int:
    """Product identity for a barcode, falling back to name + store."""
    return djb2_hash(identity_key(barcode, product_name, store_name))
