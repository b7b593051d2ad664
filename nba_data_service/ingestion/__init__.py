"""
Ingestion layer — upstream client, wire types, mapping, and caller-side retry.

Submodules:
  balldontlie_types   — Wire shapes of the balldontlie /games endpoint
  balldontlie_client  — Paginated HTTP client with failure classification
  mapper              — Wire records → normalized Game/Team models
  retry               — Retry wrapper with Retry-After-aware backoff

Credential placement (.env, gitignored):
  BALLDONTLIE_API_KEY        — balldontlie API key (optional)
  BALLDONTLIE_BASE_URL       — API root override
  BALLDONTLIE_TIMEZONE       — Zone used to resolve "today" (default: America/New_York)
"""
