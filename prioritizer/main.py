import logging

from fastapi import FastAPI

from prioritizer.config import LOG_LEVEL
from prioritizer.routes.ai_routes import router as ai_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="TaskTuner Prioritizer")

app.include_router(ai_router, prefix="/api/ai", tags=["AI Prioritization"])

@app.get("/")
async def root():
    return {"message": "Task prioritizer is active 🚀"}
