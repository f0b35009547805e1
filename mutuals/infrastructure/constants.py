"""Infrastructure-related constants."""

# Database
POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60

# Naming convention for constraints so migrations stay deterministic
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Key-value store
RATE_LIMIT_KEY_PREFIX = "ratelimit:"

# Outbound HTTP
SENDGRID_SERVICE = "sendgrid"
MAILCHIMP_SERVICE = "mailchimp"
MAILCHIMP_API_URL_TEMPLATE = "https://{server}.api.mailchimp.com/3.0"
