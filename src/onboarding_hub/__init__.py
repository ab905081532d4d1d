"""
OnboardingHub - Spreadsheet onboarding ingestion.

Links independently-authored company, CEO, organization-admin and user-request
sheets into one foreign-key-consistent record set ready for bulk insertion.
"""

__version__ = "0.1.0"
