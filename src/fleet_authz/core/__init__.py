"""Core contracts (catalog, hierarchy, policy) with no I/O."""
