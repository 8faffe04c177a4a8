"""Schemas shipped as package data."""
