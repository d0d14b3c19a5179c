"""Domain layer — tree model, type rules, validation, mutation, aggregation.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
