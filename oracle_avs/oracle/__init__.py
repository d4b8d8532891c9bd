from oracle_avs.oracle.price_source import BinancePriceSource, PriceSource

__all__ = ["BinancePriceSource", "PriceSource"]
