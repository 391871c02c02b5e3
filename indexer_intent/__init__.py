"""Conversational intent resolver for blockchain transfer indexing."""
