"""Domain layer for OnboardingHub."""
