# This file makes the app directory a Python package

"""
Feedback Bot: WhatsApp-based feedback collection service.

This package provides a FastAPI application that receives WhatsApp webhooks
and walks each user through a short conversation collecting their name,
their feedback and a profile photo.
"""

__version__ = "0.1.0"
