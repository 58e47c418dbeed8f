"""Backend-agnostic contract checks for FeedStore implementations."""
