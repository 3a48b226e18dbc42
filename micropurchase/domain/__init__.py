"""
micropurchase.domain — Canonical data models, enumerations and errors.

This package defines the source-of-truth types shared across every layer
of the bidding service. Nothing in here should import from other
micropurchase sub-packages (only stdlib).
"""
