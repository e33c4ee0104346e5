"""Values shared by the models, schemas and HTTP layer."""

from hajzi.config.settings import settings

DEFAULT_PAGE: int = 1
DEFAULT_PAGE_SIZE: int = settings.DEFAULT_PAGE_SIZE
MAX_PAGE_SIZE: int = settings.MAX_PAGE_SIZE

HEADER_REQUEST_ID: str = "X-Request-ID"
HEADER_PROCESS_TIME: str = "X-Process-Time"

# Booking column limits
MIN_ADULTS: int = 1
MAX_ADULTS: int = 20
MIN_CHILDREN: int = 0
MAX_CHILDREN: int = 10
MAX_NOTES_LENGTH: int = 1000
MAX_DISCOUNT_CODE_LENGTH: int = 50
MAX_NAME_LENGTH: int = 100

# Yemeni mobile numbers: optional 967 country code followed by nine digits
PHONE_NUMBER_PATTERN: str = r"^(\+?967)?[0-9]{9}$"
YEMEN_COUNTRY_CODE: str = "967"
WHATSAPP_BASE_URL: str = "https://wa.me/"
