"""
TLS cipher suites the server accepts on its listeners.

The list matches the suites Go enables by default, static RSA key exchange
included. RC4, 3DES and CBC with SHA-256 suites are rejected even when the TLS
library still implements them.
"""

from typing import Dict, Iterable, NamedTuple, Optional


class CipherSuite(NamedTuple):
    """An IANA-named cipher suite with its wire ID and OpenSSL name."""

    name: str
    id: int
    # None for TLS 1.3 suites, which OpenSSL does not let callers configure.
    openssl_name: Optional[str]


_ACCEPTED_CIPHER_SUITES = (
    CipherSuite("TLS_RSA_WITH_AES_128_CBC_SHA", 0x002F, "AES128-SHA"),
    CipherSuite("TLS_RSA_WITH_AES_256_CBC_SHA", 0x0035, "AES256-SHA"),
    CipherSuite("TLS_RSA_WITH_AES_128_GCM_SHA256", 0x009C, "AES128-GCM-SHA256"),
    CipherSuite("TLS_RSA_WITH_AES_256_GCM_SHA384", 0x009D, "AES256-GCM-SHA384"),
    CipherSuite("TLS_AES_128_GCM_SHA256", 0x1301, None),
    CipherSuite("TLS_AES_256_GCM_SHA384", 0x1302, None),
    CipherSuite("TLS_CHACHA20_POLY1305_SHA256", 0x1303, None),
    CipherSuite("TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA", 0xC009, "ECDHE-ECDSA-AES128-SHA"),
    CipherSuite("TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA", 0xC00A, "ECDHE-ECDSA-AES256-SHA"),
    CipherSuite("TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA", 0xC013, "ECDHE-RSA-AES128-SHA"),
    CipherSuite("TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA", 0xC014, "ECDHE-RSA-AES256-SHA"),
    CipherSuite("TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256", 0xC02B, "ECDHE-ECDSA-AES128-GCM-SHA256"),
    CipherSuite("TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384", 0xC02C, "ECDHE-ECDSA-AES256-GCM-SHA384"),
    CipherSuite("TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256", 0xC02F, "ECDHE-RSA-AES128-GCM-SHA256"),
    CipherSuite("TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384", 0xC030, "ECDHE-RSA-AES256-GCM-SHA384"),
    CipherSuite("TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305_SHA256", 0xCCA8, "ECDHE-RSA-CHACHA20-POLY1305"),
    CipherSuite("TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305_SHA256", 0xCCA9, "ECDHE-ECDSA-CHACHA20-POLY1305"),
)


def get_accepted_ciphers() -> Dict[str, int]:
    """
    Get the accepted cipher suites.

    Returns:
        Mapping of IANA cipher suite name to its 16-bit ID. A fresh dict is
        returned on every call.
    """
    return {suite.name: suite.id for suite in _ACCEPTED_CIPHER_SUITES}


def to_openssl_cipher_string(names: Iterable[str]) -> str:
    """
    Convert accepted IANA cipher suite names to an OpenSSL cipher list.

    The result is suitable for ssl.SSLContext.set_ciphers(). TLS 1.3 suites
    are skipped since they cannot be restricted that way.

    Args:
        names: IANA cipher suite names, each of which must be accepted

    Returns:
        Colon-separated OpenSSL cipher names, empty when nothing maps

    Raises:
        KeyError: If a name is not an accepted cipher suite
    """
    by_name = {suite.name: suite for suite in _ACCEPTED_CIPHER_SUITES}
    openssl_names = []
    for name in names:
        suite = by_name[name]
        if suite.openssl_name is not None:
            openssl_names.append(suite.openssl_name)
    return ":".join(openssl_names)
