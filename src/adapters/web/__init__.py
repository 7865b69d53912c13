"""Web adapter — FastAPI app, session auth and API routes."""
