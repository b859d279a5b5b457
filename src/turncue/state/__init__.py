"""State/store layer.

This package is the single source of truth for the readiness snapshot
the presentation layer renders. Checks produce `SignalUpdate` events;
the store merges them into immutable `ReadinessState` values.
"""
