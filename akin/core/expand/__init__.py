"""Scope resolution and expansion.

Every block computes its own duplication factor from the variables it
references directly; child blocks are expanded independently and spliced
into each copy of their parent as a single unit.
"""
