"""Technology signals: frameworks, storage, auth, commerce and integrations."""

from __future__ import annotations

from typing import List

from ..models import TECHNOLOGY
from .base import TECHNOLOGY_GROUP, Detector, pattern

CODE_EXTENSIONS = frozenset(
    {
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".ts",
        ".tsx",
        ".py",
        ".java",
        ".kt",
        ".php",
        ".rb",
        ".go",
        ".cs",
        ".vue",
        ".svelte",
    }
)
MARKUP_EXTENSIONS = frozenset({".html", ".htm", ".ejs", ".hbs", ".vue", ".svelte", ".jsx", ".tsx"})
STRUCTURED_LOGGING = r"\b(winston|pino|bunyan|log4js|morgan|structlog|loguru)\b|logging\.getLogger"


def _tech(name: str, regex: str, **kwargs) -> Detector:
    return pattern(f"tech.{name}", TECHNOLOGY, TECHNOLOGY_GROUP, regex, **kwargs)


TECHNOLOGY_DETECTORS: List[Detector] = [
    # commerce
    _tech("payment_processor", r"\b(stripe|paypal|braintree|adyen|mollie|razorpay|squareup)\b", strength=2.0),
    _tech(
        "payment_wallets",
        r"apple\s?pay|google\s?pay|payment_?request|klarna|afterpay|payment_method_types",
    ),
    _tech("checkout", r"\b(checkout|payments?)\b"),
    _tech("commerce", r"\b(cart|basket|products?|sku|orders?)\b"),
    _tech("recommendations", r"recommend|also[_\s-]?bought|personali[sz]"),
    # audience
    _tech("customer_facing", r"\b(customers?|visitors?|landing|homepage|storefront|website|shop)\b"),
    _tech("frontend", r"\b(react|vue|angular|svelte)\b|<html|document\.getElementById"),
    _tech("marketing_pages", r"<meta\s|og:title|sitemap|newsletter|\bseo\b", extensions=MARKUP_EXTENSIONS | CODE_EXTENSIONS),
    _tech("admin_panel", r"\b(admin|employees?|staff|internal|backoffice|intranet|inventory)\b"),
    # data
    _tech(
        "data_management",
        r"\b(crud|insert\s+into|findAll|findOne|find_by|bulk_create)\b|\.save\(|\.create\(",
        extensions=CODE_EXTENSIONS,
    ),
    _tech("reporting", r"\b(reports?|reporting|dashboards?|chart\.js|recharts|to_csv|exportCsv)\b"),
    _tech(
        "database",
        r"\b(database|mysql|postgres(ql)?|mongo(db|ose)?|sqlite3?|sequelize|prisma|typeorm|knex|sqlalchemy)\b|\bdb\.",
        extensions=CODE_EXTENSIONS,
    ),
    _tech("caching", r"\b(redis|ioredis|memcached?|lru[-_]cache|node-cache|cache)\b"),
    # api
    _tech(
        "http_routes",
        r"\b(app|router)\.(get|post|put|delete|patch)\(|@\w+\.(get|post|put|delete|route)\(|@(Get|Post|Request)Mapping",
        extensions=CODE_EXTENSIONS,
    ),
    _tech(
        "api_framework",
        r"\b(express|fastify|koa|@nestjs|flask|fastapi|django|spring-boot|springframework)\b",
    ),
    # auth
    _tech(
        "auth_provider",
        r"\b(auth0|okta|clerk|cognito|keycloak|next-auth)\b|firebase[./]auth|supabase\.auth|passport-(google|github|oauth)",
    ),
    # quality of implementation
    _tech(
        "validation_library",
        r"validat(e|ion|or)|\b(joi|yup|zod|ajv|celebrate|pydantic|marshmallow)\b",
        extensions=CODE_EXTENSIONS,
    ),
    _tech("structured_logging", STRUCTURED_LOGGING, extensions=CODE_EXTENSIONS),
    _tech(
        "error_tracking",
        r"\b(sentry|datadog|dd-trace|newrelic|rollbar|bugsnag|honeybadger|opentelemetry|prometheus)\b",
    ),
    # integrations
    _tech("search_engine", r"\b(elasticsearch|algolia|meilisearch|typesense|opensearch|solr|lunr)\b|fuse\.js"),
    _tech("chat_support", r"\b(chatbot|intercom|zendesk|crisp|tawk|livechat|dialogflow|openai)\b"),
    _tech("analytics", r"\b(gtag|mixpanel|amplitude|posthog|plausible|segment)\b|google-analytics"),
    _tech("email_api", r"\b(sendgrid|mailgun|postmark|mailchimp|resend)\b|client-ses|\bses\.send"),
    _tech("self_hosted_email", r"\b(nodemailer|smtplib)\b|createTransport|\bsmtp\b"),
    _tech("local_file_storage", r"\bmulter\b|diskStorage|fs\.writeFile|UPLOAD_FOLDER|['\"]\.?/?uploads/"),
    _tech("cloud_storage", r"\b(s3|cloudinary|uploadcare)\b|@google-cloud/storage|@azure/storage-blob|boto3"),
    _tech("consent_management", r"cookie[_\s-]?consent|cookiebot|onetrust|consent[_\s-]?banner"),
    _tech("secret_manager", r"process\.env|os\.environ|\bdotenv\b|getenv\(|secretsmanager|\bvault\b"),
]


__all__ = ["CODE_EXTENSIONS", "MARKUP_EXTENSIONS", "STRUCTURED_LOGGING", "TECHNOLOGY_DETECTORS"]
