"""
Interfaces Layer

Inbound adapters (HTTP).
"""
