"""Payment intents and confirmation."""
