"""
Job source adapters

Each adapter fetches one upstream job API over httpx and normalizes its
jobs into RawPosting objects. See registry.py for the adapter list.
"""
