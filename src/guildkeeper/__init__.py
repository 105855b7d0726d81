"""guildkeeper — client-side orchestration for a token-weighted DAO treasury.

Validates token custody before mutating calls, sequences multi-step proposal
workflows, and rebuilds membership and proposal history from the ledger.
"""
