"""
basescout: read-only Base network explorer tools for LLM agents.

Exposes Blockscout data (accounts, transactions, logs, tokens, contract ABIs
and DEX router activity) as validated tools on an agno Toolkit.
"""

__version__ = "0.1.0"
