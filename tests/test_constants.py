"""
Centralized test identities and tokens.

Tokens are loaded from environment variables when available, with clearly
non-production placeholders as fallbacks.
"""

from __future__ import annotations

import os
from uuid import UUID

# Identity-provider users used across API and service tests
OWNER_ID = UUID("11111111-1111-4111-8111-111111111111")
MEMBER_ID = UUID("22222222-2222-4222-8222-222222222222")
OUTSIDER_ID = UUID("33333333-3333-4333-8333-333333333333")

OWNER_EMAIL = "owner@ward-a.example.com"
MEMBER_EMAIL = "nurse@ward-a.example.com"
OUTSIDER_EMAIL = "visitor@example.com"

# Bearer tokens accepted by the fake identity verifier (>= 10 chars)
OWNER_TOKEN = os.environ.get("TEST_OWNER_TOKEN") or "owner-token-0001"
MEMBER_TOKEN = os.environ.get("TEST_MEMBER_TOKEN") or "member-token-0002"
OUTSIDER_TOKEN = os.environ.get("TEST_OUTSIDER_TOKEN") or "outsider-token-0003"

# Identity provider config for verifier tests
TEST_SUPABASE_URL = "https://identity.test"
TEST_SERVICE_KEY = os.environ.get("TEST_SERVICE_KEY") or "service-role-key"
