"""Transaction event semantics engine for the Tempo chain explorer."""
