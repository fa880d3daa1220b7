"""SaveMate API.

Coupon and deal marketplace backend: credential issuance, role and ownership
based authorization, deal moderation with an audit trail, and the shared deal
query engine.
"""

__version__ = "0.1.0"
