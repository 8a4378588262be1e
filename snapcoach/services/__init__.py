"""Pipeline services: vision stages, parsing, history and weekly reports."""
