"""
Signers - signing and chain capabilities used by the mechanisms
"""
