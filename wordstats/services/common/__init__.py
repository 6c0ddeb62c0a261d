"""
Common utilities shared across pipeline phases.

Modules:
    - text_cleaner: Boilerplate removal around the document body
"""
