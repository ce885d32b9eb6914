"""Match domain services: lineups, handicaps and score aggregation.

Imported by HTTP routes and CLI commands; keeps the rules for adjusting and
rolling up scores out of the transport layer.
"""
