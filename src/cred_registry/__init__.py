"""
cred_registry — tamper-evident academic credential registry.

A single owner authorizes issuing institutions; authorized institutions
issue permanent, globally unique certificates to holders; anyone can
verify a holder's credentials.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable error handling.
"""

__version__ = "0.1.0"
