"""
Wire-level names shared by both protocol generations.
"""

# V2 parameter names
APPID = "appid"
MCH_ID = "mch_id"
NONCE_STR = "nonce_str"
SIGN = "sign"
SIGN_TYPE = "sign_type"
KEY = "key"
RETURN_CODE = "return_code"
RETURN_MSG = "return_msg"
RESULT_CODE = "result_code"

SUCCESS = "SUCCESS"

# Fields that carry a signature and never take part in canonicalization
RESERVED_FIELDS = frozenset({SIGN, SIGN_TYPE})

# V3 response headers
HEADER_SERIAL = "Wechatpay-Serial"
HEADER_TIMESTAMP = "Wechatpay-Timestamp"
HEADER_NONCE = "Wechatpay-Nonce"
HEADER_SIGNATURE = "Wechatpay-Signature"

AUTHORIZATION_SCHEMA = "WECHATPAY2-SHA256-RSA2048"

AEAD_AES_256_GCM = "AEAD_AES_256_GCM"

DEFAULT_BASE_URL = "https://api.mch.weixin.qq.com"
CERTIFICATES_PATH = "/v3/certificates"
