from fastapi import FastAPI
from src.utils.config import settings
from src.utils.logging_config import setup_logging
from src.utils.observablity import PrometheusMiddleware, metrics, setting_otlp
from src.api.storefront import api_webhook

logger = setup_logging("fulfillment_service")

# the payment provider is the only client; it must reach /webhook unprefixed
app = FastAPI(title="Fulfillment Service")

setting_otlp(app=app, app_name="fulfillment_service", endpoint=settings.OTLP_ENDPOINT)

app.add_middleware(PrometheusMiddleware, app_name="fulfillment_service")
app.add_route("/metrics", metrics)

@app.get("/")
def read_root():
    return {"message": "Welcome to the Fulfillment Service"}

app.include_router(api_webhook.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8003)
