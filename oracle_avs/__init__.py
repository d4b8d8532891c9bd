"""oracle_avs: execution and validation nodes for a price-oracle / agent-strategy AVS."""

__version__ = "0.1.0"
