import os
from dotenv import load_dotenv

load_dotenv()

class Settings():
    DATABASE_URL: str = os.getenv('DATABASE_URL', 'sqlite:///./storefront.db')
    REDIS_HOST: str = os.getenv('REDIS_HOST', 'localhost')
    REDIS_PORT: int = int(os.getenv('REDIS_PORT', '6379'))

    STRIPE_SECRET_KEY: str = os.getenv('STRIPE_SECRET_KEY', '')
    STRIPE_WEBHOOK_SECRET: str = os.getenv('STRIPE_WEBHOOK_SECRET', '')
    CURRENCY: str = os.getenv('CURRENCY', 'eur')

    # Vector overlays and raster backgrounds live under the same asset root
    MAP_ASSET_BASE_URL: str = os.getenv('MAP_ASSET_BASE_URL', 'http://localhost:3000/images/maps')
    ARTIST_ASSET_BASE_URL: str = os.getenv('ARTIST_ASSET_BASE_URL', '/images/artistes')
    # Registration between the overlay and its raster background, in SVG units
    SVG_CROP_OFFSET_Y: float = float(os.getenv('SVG_CROP_OFFSET_Y', '11'))
    SNAPSHOT_TTL: int = int(os.getenv('SNAPSHOT_TTL', '60'))
    CART_TTL: int = int(os.getenv('CART_TTL', str(30 * 24 * 3600)))

    RESEND_API_KEY: str = os.getenv('RESEND_API_KEY', '')
    RESEND_API_URL: str = os.getenv('RESEND_API_URL', 'https://api.resend.com')
    EMAIL_FROM: str = os.getenv('EMAIL_FROM', 'onboarding@resend.dev')

    LOKI_URL: str = os.getenv('LOKI_URL', '')
    OTLP_ENDPOINT: str = os.getenv('OTLP_ENDPOINT', '')
    ENVIRONMENT: str = os.getenv('ENVIRONMENT', 'development')

settings = Settings()
