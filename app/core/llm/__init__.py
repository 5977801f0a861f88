"""LLM integration layer.

This package is intentionally small:
- Errors are tagged by class (rate limited vs. everything else) so callers never
  have to inspect messages or status codes.
- Configurable via environment variables.
- Treated as a stateless function by callers; pacing and retries live in `app.chat`.
"""
