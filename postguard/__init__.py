"""PostGuard: admission control for a paid text-generation API."""
