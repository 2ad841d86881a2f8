"""Chain-level helpers: ABI encoding, addresses, ENS, call scripts, numbers."""
