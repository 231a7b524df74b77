"""Cross-cutting concerns: settings, errors, security, pagination, envelopes."""
