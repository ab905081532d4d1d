"""
Infrastructure Layer

Reusable services supporting the onboarding domain without containing its
business rules.

Components:
- identity: company key normalization, matching strategies and entity linking
- validation: structured collection of recoverable extraction issues
"""
