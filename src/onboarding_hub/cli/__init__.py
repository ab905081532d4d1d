"""Command-line interface for OnboardingHub (``python -m onboarding_hub.cli``)."""
