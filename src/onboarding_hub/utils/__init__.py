"""Shared utilities for OnboardingHub."""
