"""
Domain constants used across services/routers.
"""

# Catalog paging
PRODUCTS_DEFAULT_LIMIT = 12
PRODUCTS_MAX_LIMIT = 100
ORDERS_DEFAULT_LIMIT = 10
ADMIN_ORDERS_DEFAULT_LIMIT = 20

# Storefront browse price slider bounds
BROWSE_MIN_PRICE = 0.0
BROWSE_MAX_PRICE = 5000.0

# Stripe
MIN_PAYMENT_AMOUNT = 0.5
STRIPE_SUCCEEDED = "succeeded"
EVENT_PAYMENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_PAYMENT_FAILED = "payment_intent.payment_failed"
