"""HTTP routes for the tutoring platform's session engine."""
