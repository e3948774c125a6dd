"""Features module for neo-campus.

Each feature package exports its entities and services from its
``entities`` and ``services`` subpackages.
"""
