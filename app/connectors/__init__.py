"""App-level connectors.

Canonical location:
  app.connectors.ted.*   TED / Tenders Electronic Daily (EU Search API)
"""
