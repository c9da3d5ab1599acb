"""
Signing key resolution.

Contains the logic for fetching a provider's JSON Web Key Set and for
decoding a configured X.509 public key string.

Key points:
- One fetch per call; callers own any caching.
- The last RSA key with ``use == "sig"`` in the set is the signing key.
"""
