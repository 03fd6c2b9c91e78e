from fastapi import FastAPI
from src.utils.config import settings
from src.utils.logging_config import setup_logging
from src.utils.observablity import PrometheusMiddleware, metrics, setting_otlp
from src.api.storefront import api_events, api_seating, api_cart, api_checkout

logger = setup_logging("storefront_service")

app = FastAPI(title="Storefront Service", root_path="/storefront")

setting_otlp(app=app, app_name="storefront_service", endpoint=settings.OTLP_ENDPOINT)

app.add_middleware(PrometheusMiddleware, app_name="storefront_service")
app.add_route("/metrics", metrics)

@app.get("/")
def read_root():
    return {"message": "Welcome to the Storefront Service"}

app.include_router(api_events.router)
app.include_router(api_seating.router)
app.include_router(api_cart.router)
app.include_router(api_checkout.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8002)
