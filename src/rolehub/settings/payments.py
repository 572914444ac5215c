from decouple import config

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", "BRL")
MERCADOPAGO_ACCESS_TOKEN = config("MERCADOPAGO_ACCESS_TOKEN", default="TEST-0000000000000000-000000-placeholder")
# Secret shown in the MercadoPago dashboard for webhook signatures. Empty disables verification.
MERCADOPAGO_WEBHOOK_SECRET = config("MERCADOPAGO_WEBHOOK_SECRET", default="")
MERCADOPAGO_NOTIFICATION_URL = config("MERCADOPAGO_NOTIFICATION_URL", default="")
# Redirect buyers to sandbox_init_point instead of init_point
MERCADOPAGO_SANDBOX = config("MERCADOPAGO_SANDBOX", default=True, cast=bool)
