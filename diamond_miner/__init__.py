"""Diamond Miner board generation and play simulation."""
