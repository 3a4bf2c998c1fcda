"""Client library for the Lockrion token-lock / reward-issuance program."""

__version__ = "0.1.0"
