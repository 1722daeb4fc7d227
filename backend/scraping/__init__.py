"""
Scraping module

Fetches postings from every enabled source, deduplicates them by
fingerprint and inserts new records as unenriched.
"""
