"""Development helpers (opt-in instrumentation)."""
