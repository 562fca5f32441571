"""Domain services: record store, payments, donation flow, reconciliation, mail."""
