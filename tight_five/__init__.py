"""Tight Five: a standup comedy writing workshop backend."""
