"""Pilkada 2024 results dashboard: fetching, view state, charts."""
