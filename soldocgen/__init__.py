"""
soldocgen - NatSpec documentation bundles from compiled Solidity artifacts.

Reads the compiler output of every contract in a project, reconciles the
devdoc/userdoc annotations with the ABI by member signature, and writes a
static documentation bundle.
"""

__version__ = "0.1.0"
