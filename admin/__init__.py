"""Krevv panel web application package."""
