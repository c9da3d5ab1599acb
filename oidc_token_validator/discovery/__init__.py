"""
Identity provider metadata discovery.

Metadata comes from the OpenID Connect discovery document or is assembled
from endpoint paths configured on the relying party.
"""
