from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 8787)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "0.0.0.0")

# Timeout configuration
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Upstream timeout: Total timeout for provider calls and proxied requests
UPSTREAM_TIMEOUT = config.get("UPSTREAM_TIMEOUT", 60.0)

# GitHub App credentials (server-side only, never echoed or logged)
GITHUB_CLIENT_ID = config.get("GITHUB_CLIENT_ID", "")
GITHUB_CLIENT_SECRET = config.get("GITHUB_CLIENT_SECRET", "")
GITHUB_APP_SLUG = config.get("GITHUB_APP_SLUG", "cent-accounting")

# Shared secret for state and session tokens
ENCRYPTION_SECRET = config.get("ENCRYPTION_SECRET", "")

# GitHub endpoints (hardcoded - not user configurable)
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_INSTALLATIONS_URL = "https://api.github.com/user/installations"
GITHUB_INSTALL_URL_TEMPLATE = "https://github.com/apps/{slug}/installations/new"

# Redirect allowlist: REDIRECT_ALLOWLIST (comma separated) wins over allowlist.json
REDIRECT_ALLOWLIST = config.get_list("REDIRECT_ALLOWLIST")
REDIRECT_ALLOWLIST_FILE = config.get("REDIRECT_ALLOWLIST_FILE", "")

# State token lifetime for the authorize leg (0 disables expiry)
STATE_TTL_SECONDS = config.get("STATE_TTL_SECONDS", 3600)
# Session artifacts handed to the client (one year)
SESSION_TTL_SECONDS = config.get("SESSION_TTL_SECONDS", 31536000)
# How credentials reach the return URL: "query" (raw JSON) or "session" (encrypted)
CREDENTIAL_DELIVERY = config.get("CREDENTIAL_DELIVERY", "query")

# Mount point for the OAuth routes, e.g. "/api/github-oauth"
OAUTH_PATH_PREFIX = config.get("OAUTH_PATH_PREFIX", "")
