"""
Worker Lambda handlers for scheduled processing.

Workers:
- scrape_worker: Fetches all enabled sources and inserts new postings (scheduled)
- enrichment_worker: Claims a batch of pending records and enriches them (scheduled)
"""
