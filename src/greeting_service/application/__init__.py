"""Application layer: ports, merge policy, the greeting cell/handler and the refresher."""
