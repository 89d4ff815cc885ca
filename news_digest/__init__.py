"""Categorized RSS news digests and inline URL summaries."""
