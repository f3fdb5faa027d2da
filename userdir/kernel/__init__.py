"""
Identity kernel.

Framework-free core: password hashing, token issuance, the user repository,
the user service orchestrating them, and the registry that wires them up.
"""
