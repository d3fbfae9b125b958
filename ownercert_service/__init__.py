"""HTTP service for issuing and verifying stateless ownership certificates."""
