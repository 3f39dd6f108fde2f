"""
Constants for the Veracode API client library.
Values are fixed by the Veracode HMAC authentication scheme.
"""

VERSION = "1.0.0"

# Authorization header (bit-exact, case-sensitive)
AUTH_SCHEME = "VERACODE-HMAC-SHA-256"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"

# Signature chain inputs
REQUEST_VERSION_STRING = "vcode_request_version_1"
NONCE_SIZE = 16
SIGNING_DATA_FORMAT = "id={key_id}&host={host}&url={url}&method={method}"
HEADER_FORMAT = "{scheme} id={key_id},ts={timestamp},nonce={nonce},sig={signature}"

# Content types
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_XML = "text/xml"

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,            # HTTP timeout in seconds
    'rate_interval': 0.12,    # Seconds per token refill (~500 requests/minute)
    'rate_burst': 500,        # Token bucket capacity
    'user_agent': f"veracode-client/{VERSION}",
}

# Other constants
DEFAULT_RATE_INTERVAL = 0.12
DEFAULT_RATE_BURST = 500
DEFAULT_MAX_AGE = 5 * 60  # 5 minutes in seconds, server-side freshness window

# Credentials file
CREDENTIALS_DIR = ".veracode"
CREDENTIALS_FILE = "credentials"
PROFILE_ENV_VAR = "VERACODE_API_PROFILE"
KEY_ID_OPTION = "veracode_api_key_id"
KEY_SECRET_OPTION = "veracode_api_key_secret"
