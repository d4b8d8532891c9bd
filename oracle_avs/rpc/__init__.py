from oracle_avs.rpc.aggregator import AggregatorClient, interpret_rpc_response

__all__ = ["AggregatorClient", "interpret_rpc_response"]
