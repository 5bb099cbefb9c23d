"""Business services for PostGuard."""
