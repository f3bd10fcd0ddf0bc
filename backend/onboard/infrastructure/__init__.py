"""
External system integrations: Redis, payment providers, SMTP.
"""
