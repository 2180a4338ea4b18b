"""Client side of AlgoRadar: local snapshot, refresh orchestration and messages."""
