"""
Core model: entity types, the entity store and the relationship index.
"""
