"""
Postal code validation.

A CEP is accepted only in its raw 8-digit form. No trimming, hyphen
stripping or other normalization is performed.
"""

CEP_LENGTH = 8
_DIGITS = frozenset("0123456789")


def is_valid_cep(cep: str) -> bool:
    """
    Check whether a string is a syntactically valid CEP.

    Args:
        cep: Candidate postal code exactly as received

    Returns:
        True if the string has exactly 8 characters, all ASCII digits
    """
    if not isinstance(cep, str) or len(cep) != CEP_LENGTH:
        return False
    return all(char in _DIGITS for char in cep)
