"""Coffee sales reporting

Aggregates recent orders, employee accounts and sales totals from MongoDB
into a single JSON report served at ``GET /report``."""
