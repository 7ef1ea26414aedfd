# API Route Constants

# Base API
API_BASE = '/api'

# User routes
USER_BASE = f'{API_BASE}/user'
USER_CREATE = USER_BASE
USER_LOGIN = f'{USER_BASE}/login'
USER_ME = USER_BASE

# Product routes
PRODUCT_BASE = f'{API_BASE}/products'
PRODUCT_LIST = PRODUCT_BASE
PRODUCT_CREATE = PRODUCT_BASE
PRODUCT_AUCTIONS = f'{PRODUCT_BASE}/auctions'
PRODUCT_MY_PRODUCTS = f'{PRODUCT_BASE}/my-products'
PRODUCT_GET = f'{PRODUCT_BASE}/{{product_id}}'
PRODUCT_BIDS = f'{PRODUCT_BASE}/{{product_id}}/bids'
PRODUCT_AUCTION_STATE = f'{PRODUCT_BASE}/{{product_id}}/auction'
PRODUCT_SETTLE = f'{PRODUCT_BASE}/{{product_id}}/settle'

# Bid routes
BID_BASE = f'{API_BASE}/bids'
BID_MY_BIDS = f'{BID_BASE}/my-bids'

# Payment routes
PAYMENT_BASE = f'{API_BASE}/payments'
PAYMENT_CREATE_INTENT = f'{PAYMENT_BASE}/create-payment-intent'
PAYMENT_CONFIRM = f'{PAYMENT_BASE}/confirm-payment'
PAYMENT_MOCK_CONFIRM = f'{PAYMENT_BASE}/mock-confirm'
PAYMENT_WEBHOOK = f'{PAYMENT_BASE}/webhook'
PAYMENT_HISTORY = f'{PAYMENT_BASE}/history'
PAYMENT_STATUS = f'{PAYMENT_BASE}/status/{{payment_intent_id}}'
PAYMENT_CONFIG = f'{PAYMENT_BASE}/config'

# Order routes
ORDER_BASE = f'{API_BASE}/orders'
ORDER_LIST = ORDER_BASE
ORDER_GET = f'{ORDER_BASE}/{{order_id}}'
ORDER_SHIP = f'{ORDER_BASE}/{{order_id}}/ship'
ORDER_CONFIRM_DELIVERY = f'{ORDER_BASE}/{{order_id}}/confirm-delivery'
ORDER_CANCEL = f'{ORDER_BASE}/{{order_id}}/cancel'

# Wallet routes
WALLET_BASE = f'{API_BASE}/wallet'
WALLET_BALANCE = f'{WALLET_BASE}/balance'
WALLET_ADD_FUNDS = f'{WALLET_BASE}/add-funds'
WALLET_PURCHASE = f'{WALLET_BASE}/purchase'
WALLET_TRANSFER = f'{WALLET_BASE}/transfer'
WALLET_TRANSACTIONS = f'{WALLET_BASE}/transactions'
WALLET_STATS = f'{WALLET_BASE}/stats'

# Enterprise routes
ENTERPRISE_BASE = f'{API_BASE}/enterprise'
ENTERPRISE_LISTING_CREATE = f'{ENTERPRISE_BASE}/listing'
ENTERPRISE_LISTING_PUBLISH = f'{ENTERPRISE_BASE}/listing/{{listing_id}}/publish'
ENTERPRISE_LISTINGS = f'{ENTERPRISE_BASE}/listings'
ENTERPRISE_QUOTE_REQUEST = f'{ENTERPRISE_BASE}/quote-request'
ENTERPRISE_QUOTE_RESPONSE = f'{ENTERPRISE_BASE}/quote-response'
ENTERPRISE_QUOTE_RESPONSE_ACCEPT = f'{ENTERPRISE_BASE}/quote-response/{{response_id}}/accept'
ENTERPRISE_QUOTE_RESPONSE_REJECT = f'{ENTERPRISE_BASE}/quote-response/{{response_id}}/reject'
ENTERPRISE_MY_REQUESTS = f'{ENTERPRISE_BASE}/my-requests'
ENTERPRISE_VENDOR_DASHBOARD = f'{ENTERPRISE_BASE}/vendor-dashboard'

# Admin routes
ADMIN_BASE = f'{API_BASE}/admin'
ADMIN_STATS = f'{ADMIN_BASE}/stats'
ADMIN_USERS = f'{ADMIN_BASE}/users'
ADMIN_USER_VERIFY = f'{ADMIN_BASE}/users/{{user_id}}/verify'
ADMIN_PRODUCTS = f'{ADMIN_BASE}/products'
ADMIN_PRODUCT_APPROVE = f'{ADMIN_BASE}/products/{{product_id}}/approve'
ADMIN_PRODUCT_SUSPEND = f'{ADMIN_BASE}/products/{{product_id}}/suspend'
ADMIN_CATEGORIES = f'{ADMIN_BASE}/categories'
ADMIN_CATEGORY_DELETE = f'{ADMIN_BASE}/categories/{{category_id}}'
ADMIN_ORDERS = f'{ADMIN_BASE}/orders'
ADMIN_SETTLE_EXPIRED = f'{ADMIN_BASE}/auctions/settle-expired'
