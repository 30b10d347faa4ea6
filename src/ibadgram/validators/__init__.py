"""Pure structural validation run before a handler opens a transaction."""
