"""EcoEarn receipt submission service."""
