"""
Enrichment module

- queue.py: status state machine over the record store
- provider.py: enrich(record) -> fields
- control.py: operator stats/enqueue/reset surface
"""
