"""
Front Office Core Primitives — Reusable Domain Building Blocks
==============================================================

Primitives are the shared, engine-agnostic building blocks that
the front office engine consumes. They are:

- Pure Python (no Django dependency)
- Immutable where they are values (frozen dataclasses)
- Deterministic (time comes from the injectable clock)

Primitives:
    money     — Decimal monetary value with currency guard
    party     — Address, contact information, CPF
    entity    — Entity, AggregateRoot, DomainEvent base
    identity  — Time-ordered (version-7) entity ids
    workflow  — Declarative state machine definition
    errors    — Domain error taxonomy
"""
