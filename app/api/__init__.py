"""HTTP routes: the WhatsApp webhook and session monitoring endpoints."""
