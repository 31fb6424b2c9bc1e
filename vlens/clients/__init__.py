"""Package clients, transport and response cache."""
