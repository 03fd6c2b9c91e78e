from fastapi import FastAPI
from src.utils.config import settings
from src.utils.logging_config import setup_logging
from src.utils.observablity import PrometheusMiddleware, metrics, setting_otlp
from src.api.main_router import router as main_router

logger = setup_logging("main")

app = FastAPI(title="Ticket Storefront API")

setting_otlp(app=app, app_name="main", endpoint=settings.OTLP_ENDPOINT)

app.add_middleware(PrometheusMiddleware, app_name="main")
app.add_route("/metrics", metrics)

@app.get("/")
def read_root():
    return {"message": "Welcome to the Ticket Storefront API"}

app.include_router(main_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8100)
