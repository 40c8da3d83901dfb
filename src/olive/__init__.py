"""
Olive: a shared second brain for couples.

Captures free-form notes from two partners and turns each one into a
categorized, optionally dated record:
- LLM-powered classification with a heuristic backstop
- A durable, newest-first note store
- Couple identity and onboarding state
"""

__version__ = "0.1.0"
