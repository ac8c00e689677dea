"""Pure domain helpers (schema model, matching rules, request patterns)."""
