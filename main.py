from fastapi import FastAPI

from shared.config.database import SERVICE_SCHEMAS, create_schema

# IMPORTANT: importing the apps registers every model with Base
from services.order_service.main import order_app
from services.notification_service.main import notification_app

app = FastAPI(title="Gift Shop Cluster")

@app.on_event("startup")
async def startup_event():
    # Mounted apps do not receive lifespan events; create all schemas here
    for schema in SERVICE_SCHEMAS:
        await create_schema(schema)

@app.get("/health")
async def health():
    return {"status": "ok", "services": ["order", "notification"]}

app.mount("/orders", order_app)
app.mount("/notifications", notification_app)


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
