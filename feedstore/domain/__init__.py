"""Domain Layer: feed models, result shapes, errors and the store port."""
