"""SellerHub marketplace back-office: company and brand onboarding engine."""

__version__ = "0.1.0"
