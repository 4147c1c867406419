"""Score ledger for three-player Fight the Landlord matches."""

__all__ = [
    "models",
    "bidding",
    "multipliers",
    "scoring",
    "rotation",
    "match",
    "statistics",
    "schema",
    "store",
    "settings",
    "logging",
    "service",
]
